"""API Consulta Creditos - read-only queries over constituted ISSQN credits.

Architecture Overview:
- **API Layer**: FastAPI routes, middleware and the error envelope
- **Core Layer**: Configuration, logging, tracing and exceptions
- **Domain Layer**: Credit model, validation, queries and response shaping
- **Infrastructure Layer**: PostgreSQL access and the Kafka audit publisher
"""
