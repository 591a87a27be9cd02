# wastepay/services/base_service.py
"""
BaseService: shared session handling for the domain services.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ServerError
from ..db.engine import IMMEDIATE_WRITE

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")


class BaseService:
    """
    Base class holding the ``AsyncSession`` every service works on.

    Usage:
        class MyService(BaseService):
            async def do_something(self):
                async with self.unit_of_work():
                    ...
    """

    def __init__(self, session: AsyncSession):
        """
        Args:
            session: Async SQLModel session owned by the caller.
        """
        self.session = session

    @asynccontextmanager
    async def unit_of_work(
        self,
        conflict_message: str = "Conflicting change",
        conflict_status: Optional[int] = None,
    ) -> AsyncIterator[AsyncSession]:
        """
        Run the enclosed reads and writes as one transaction.

        Commits on success. Any exception rolls the transaction back before it
        propagates; integrity violations detected by the database become a
        ``ConflictError`` and other database failures a ``ServerError``.

        The transaction is opened as a write transaction (BEGIN IMMEDIATE on
        SQLite); a read-only transaction left open by earlier queries on the
        session is ended first.
        """
        try:
            if self.session.in_transaction():
                await self.session.commit()
            await self.session.connection(execution_options={IMMEDIATE_WRITE: True})
            yield self.session
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Integrity violation, transaction rolled back: {e.orig}")
            raise ConflictError(conflict_message, status_code=conflict_status) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Database error, transaction rolled back")
            raise ServerError("Database error") from e
        except BaseException:
            await self.session.rollback()
            raise

    async def _get_or_404(self, model: Type[ModelType], id, label: str) -> ModelType:
        """Fetch a record by primary key or raise ``NotFoundError``."""
        record = await self.session.get(model, id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record
