"""
Database handle shared by every request.

The handle is created once at startup and connects lazily: the first caller
opens the backend, callers arriving while that attempt is in flight await the
same attempt, and a failed attempt is dropped so the next caller starts over.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

from fastapi import Request
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Connect-once wrapper around a storage backend.

    ``opener`` is a blocking callable returning a backend object that exposes
    a ``repositories()`` context manager. It runs in a worker thread.
    """

    def __init__(self, opener: Callable[[], Any]):
        self._opener = opener
        self._backend: Optional[Any] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def connected(self) -> bool:
        return self._backend is not None

    async def connect(self) -> Any:
        if self._backend is not None:
            return self._backend

        if self._pending is None:
            self._pending = asyncio.ensure_future(asyncio.to_thread(self._opener))
        pending = self._pending

        try:
            backend = await asyncio.shield(pending)
        except Exception:
            if self._pending is pending:
                self._pending = None
            raise

        if self._backend is None:
            self._backend = backend
            logger.info("Database connection established")
        return self._backend

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Any]:
        """Yield the repositories bound to a fresh unit of work."""
        backend = await self.connect()
        with backend.repositories() as repos:
            yield repos

    async def close(self) -> None:
        backend, self._backend, self._pending = self._backend, None, None
        if backend is not None and hasattr(backend, "close"):
            await asyncio.to_thread(backend.close)


async def get_db(request: Request) -> AsyncIterator[Any]:
    """FastAPI dependency yielding repositories from the app's Database"""
    database: Database = request.app.state.database
    async with database.session() as repos:
        yield repos


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the app's Database without connecting"""
    return request.app.state.database
