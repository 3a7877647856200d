"""
The atomic unit of work used by every inventory mutation.

    async with unit_of_work(session_factory) as session:
        ...

Everything done with `session` inside the block commits together when the
block exits normally. Any exception rolls the whole unit back. Domain errors
propagate unchanged; database failures (lost connection, lock timeout,
commit failure) are reported as TransactionFailedError.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rail_reservation.core.exceptions import TransactionFailedError
from rail_reservation.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def unit_of_work(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        try:
            async with session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error("transaction_failed", error=str(e), error_type=type(e).__name__)
            raise TransactionFailedError("The transaction could not be completed. Please try again.") from e
