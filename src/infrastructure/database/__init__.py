"""Database access with async SQLAlchemy over PostgreSQL (asyncpg).

- **base**: Declarative base and common model fields
- **session**: Async engine and session management
- **repository**: Generic read repository
- **dependencies**: FastAPI dependency injection helpers
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import DatabaseSession, get_db
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_async_session,
    get_engine,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "check_database_connection",
    "close_database",
    "get_async_session",
    "get_db",
    "get_engine",
]
