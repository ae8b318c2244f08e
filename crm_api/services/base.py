"""Shared plumbing for services that talk to the database through a gateway."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from crm_api.database import Database
from crm_api.exceptions import PersistenceError

logger = logging.getLogger(__name__)

GatewayT = TypeVar("GatewayT")

# Look-ahead window for expiry projections, in days
DEFAULT_DAYS_AHEAD = 30


class GatewayService(Generic[GatewayT]):
    """Base class giving each operation one scoped connection wrapped in a gateway."""

    def __init__(self, database: Database, gateway_factory: Callable[[AsyncConnection], GatewayT]):
        self.database = database
        self.gateway_factory = gateway_factory

    @asynccontextmanager
    async def _gateway(self, operation: str, **context: Any) -> AsyncIterator[GatewayT]:
        """Borrow a connection for one operation and translate driver errors.

        The connection goes back to the pool on every exit path. Driver errors
        are logged with the operation name (parameters at debug level only)
        and re-raised as ``PersistenceError`` with the original chained.
        """
        try:
            async with self.database.connection() as conn:
                yield self.gateway_factory(conn)
        except SQLAlchemyError as e:
            logger.error(f"Database operation '{operation}' failed: {e}")
            logger.debug(f"Parameters for '{operation}': {context}")
            raise PersistenceError(operation) from e
