"""SQLite access through SQLAlchemy's asyncio extension."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import CursorResult, Dialect
from sqlalchemy.exc import SQLAlchemyError, StatementError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from bongo.core.exceptions import (
    BongoError,
    CollectionNotFoundError,
    EngineError,
    StoreConnectionError,
)

logger = logging.getLogger(__name__)

DUPLICATE_COLUMN = "duplicate column"
NO_SUCH_TABLE = "no such table"


def is_duplicate_column(error: BaseException) -> bool:
    """Check whether an engine error reports an already-present column."""
    return DUPLICATE_COLUMN in str(error)


def is_missing_table(error: BaseException) -> bool:
    """Check whether an engine error reports a missing table."""
    return isinstance(error, CollectionNotFoundError) or NO_SUCH_TABLE in str(error)


def _statement_text(statement: Any) -> str:
    try:
        return str(statement)
    except SQLAlchemyError:
        return repr(statement)


class StorageEngine:
    """Single-connection async access to one SQLite file.
    
    Every statement runs in its own `engine.begin()` block and is committed
    on success. Driver errors are translated into EngineError so callers
    can inspect the engine's message.
    """

    def __init__(self, path: str, echo: bool = False):
        self._path = path
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def url(self) -> str:
        return f"sqlite+aiosqlite:///{self._path}"

    def _ensure_engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self.url,
                echo=self._echo,
                poolclass=StaticPool,
            )
        return self._engine

    @property
    def dialect(self) -> Dialect:
        return self._ensure_engine().dialect

    def quote(self, name: str) -> str:
        """Quote an identifier for the SQLite dialect."""
        return self.dialect.identifier_preparer.quote(name)

    async def open(self) -> None:
        """Connect and verify the storage file can be used.
        
        Raises:
            StoreConnectionError: If the file cannot be opened or created
        """
        engine = self._ensure_engine()
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Unable to open path {self._path}: {exc}")
            await self.close()
            raise StoreConnectionError(
                f"Unable to open storage file: {self._path}",
                path=self._path,
            ) from exc

    def _translate(self, exc: StatementError, statement: Any) -> BongoError:
        message = str(exc.orig) if exc.orig is not None else str(exc)
        statement_text = _statement_text(statement)
        
        if NO_SUCH_TABLE in message:
            collection = None
            if ":" in message:
                collection = message.split(":", 1)[1].strip().removeprefix("main.")
            return CollectionNotFoundError(message, statement_text, collection=collection)
        
        return EngineError(message, statement_text)

    @staticmethod
    async def _run(conn: AsyncConnection, statement: Any) -> CursorResult:
        # finished SQL skips text() so ":name" inside literals is not a bind
        if isinstance(statement, str):
            return await conn.exec_driver_sql(statement)
        return await conn.execute(statement)

    async def execute(self, statement: Any) -> int:
        """Run a write statement.
        
        Args:
            statement: SQLAlchemy executable (Core construct, DDL or text),
                or finished SQL run as is by the driver
            
        Returns:
            Number of affected rows as reported by the driver
            
        Raises:
            EngineError: If the engine rejects the statement
        """
        engine = self._ensure_engine()
        try:
            async with engine.begin() as conn:
                result = await self._run(conn, statement)
                return result.rowcount
        except StatementError as exc:
            raise self._translate(exc, statement) from exc

    async def fetch_all(self, statement: Any) -> list[dict[str, Any]]:
        """Run a read statement.
        
        Args:
            statement: SQLAlchemy executable returning rows, or finished SQL
            
        Returns:
            Rows as plain dicts keyed by column name
            
        Raises:
            EngineError: If the engine rejects the statement
        """
        engine = self._ensure_engine()
        try:
            async with engine.begin() as conn:
                result = await self._run(conn, statement)
                return [dict(row) for row in result.mappings().all()]
        except StatementError as exc:
            raise self._translate(exc, statement) from exc

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    async def __aenter__(self) -> "StorageEngine":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
