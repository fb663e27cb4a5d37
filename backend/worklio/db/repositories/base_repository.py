"""
Base repository class.
Repositories handle database access using async SQLAlchemy sessions.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, TypeVar, Type
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.core.exceptions import StorageError
from worklio.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository holding the model class and session."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect the session is bound to."""
        return self.session.get_bind().dialect.name

    @asynccontextmanager
    async def storage_errors(self, operation: str) -> AsyncIterator[None]:
        """Re-raise driver/ORM failures as StorageError."""
        try:
            yield
        except SQLAlchemyError as exc:
            raise StorageError(
                f"{self.model.__tablename__}: {operation} failed",
                details={"operation": operation, "error": type(exc).__name__},
            ) from exc
