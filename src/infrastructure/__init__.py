"""Infrastructure layer: PostgreSQL persistence and the Kafka audit publisher.

- **database**: Async SQLAlchemy engine, sessions and the generic repository
- **messaging**: Audit event model and the non-blocking Kafka publisher
"""
