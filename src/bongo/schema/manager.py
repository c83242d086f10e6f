"""Schema manager: additive table, column and index migrations."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Union

from sqlalchemy import Column, Index, MetaData, Table, Text, literal, text
from sqlalchemy.schema import CreateIndex, CreateTable

from bongo.core.exceptions import EngineError, SchemaError
from bongo.schema.models import ID_FIELD, FieldDeclaration, StorageType
from bongo.storage.engine import StorageEngine, is_duplicate_column

logger = logging.getLogger(__name__)


def index_name(collection: str, fields: Sequence[str]) -> str:
    """Deterministic index name for a collection and field list."""
    return f"idx_{collection}_{'_'.join(fields)}"


class SchemaManager:
    """Creates and extends collection tables.
    
    Migrations are strictly additive: tables are created with only the
    `_id` primary key, declared fields are appended as columns, and
    unique declarations get a unique index. Nothing is ever dropped or
    renamed, so every call is safe to repeat.
    
    Example:
        ```python
        manager = SchemaManager(engine)
        await manager.ensure_collection("users", registry.declarations_for("users"))
        ```
    """

    def __init__(self, engine: StorageEngine) -> None:
        self._engine = engine

    async def ensure_collection(
        self,
        name: str,
        declarations: Iterable[FieldDeclaration],
    ) -> None:
        """Create the table if absent, then add missing columns and indexes.
        
        Not atomic: a failure on one field leaves earlier fields applied.
        
        Args:
            name: Collection (table) name
            declarations: Field declarations in column-add order
            
        Raises:
            SchemaError: If the table, a column or an index cannot be created
        """
        declarations = list(declarations)
        
        table = Table(
            name,
            MetaData(),
            Column(ID_FIELD, Text, primary_key=True, nullable=False),
        )
        try:
            await self._engine.execute(CreateTable(table, if_not_exists=True))
        except EngineError as exc:
            logger.error(f"Unable to create collection {name}: {exc.message}")
            raise SchemaError(
                f"Unable to create collection '{name}': {exc.message}",
                collection=name,
            ) from exc
        
        for field in declarations:
            await self.ensure_column(
                name,
                field.name,
                field.type,
                field.allow_null,
                default=field.default,
            )
        
        for field in declarations:
            if field.unique:
                await self.ensure_index(name, [field.name], unique=True)
        
        logger.debug(f"Collection {name} ensured with {len(declarations)} fields")

    def column_definition(
        self,
        field: str,
        type_: Union[StorageType, str] = StorageType.TEXT,
        allow_null: bool = True,
        default: Optional[Union[str, int, float]] = None,
    ) -> str:
        """Render the column clause of an ADD COLUMN statement."""
        parts = [self._engine.quote(field)]
        
        ddl_name = StorageType(type_).ddl_name
        if ddl_name is not None:
            parts.append(ddl_name)
        
        parts.append("NULL" if allow_null else "NOT NULL")
        
        if default is not None:
            rendered = literal(default).compile(
                dialect=self._engine.dialect,
                compile_kwargs={"literal_binds": True},
            )
            parts.append(f"DEFAULT {rendered}")
        
        return " ".join(parts)

    async def ensure_column(
        self,
        collection: str,
        field: str,
        type_: Union[StorageType, str] = StorageType.TEXT,
        allow_null: bool = True,
        default: Optional[Union[str, int, float]] = None,
    ) -> None:
        """Add a column unless it already exists.
        
        Args:
            collection: Collection name
            field: Column name
            type_: Storage type
            allow_null: Whether the column accepts NULL
            default: Column default value
            
        Raises:
            SchemaError: On any failure other than a duplicate column
        """
        statement = (
            f"ALTER TABLE {self._engine.quote(collection)} "
            f"ADD COLUMN {self.column_definition(field, type_, allow_null, default)}"
        )
        
        try:
            await self._engine.execute(statement)
            logger.debug(f"Added column {collection}.{field}")
        except EngineError as exc:
            if is_duplicate_column(exc):
                return
            logger.error(
                f"addField error: {collection} {field} {StorageType(type_).value} "
                f"allow_null={allow_null}: {exc.message}"
            )
            raise SchemaError(
                f"Unable to add column '{field}' to '{collection}': {exc.message}",
                collection=collection,
                field=field,
            ) from exc

    async def ensure_index(
        self,
        collection: str,
        fields: Sequence[str],
        unique: bool = False,
    ) -> str:
        """Create an index over the given fields if it does not exist.
        
        Args:
            collection: Collection name
            fields: Indexed column names, in order
            unique: Create a UNIQUE index
            
        Returns:
            The index name
            
        Raises:
            SchemaError: If the index cannot be created
        """
        if not fields:
            raise SchemaError(
                f"Index on '{collection}' needs at least one field",
                collection=collection,
            )
        
        name = index_name(collection, fields)
        table = Table(collection, MetaData(), *(Column(field) for field in fields))
        index = Index(name, *(table.c[field] for field in fields), unique=unique)
        
        try:
            await self._engine.execute(CreateIndex(index, if_not_exists=True))
        except EngineError as exc:
            logger.error(f"Unable to create index {name}: {exc.message}")
            raise SchemaError(
                f"Unable to create index '{name}' on '{collection}': {exc.message}",
                collection=collection,
                field=", ".join(fields),
            ) from exc
        
        return name

    async def list_collections(self) -> list[str]:
        """Get the names of all user tables."""
        rows = await self._engine.fetch_all(
            text(
                "SELECT name FROM sqlite_master "
                "WHERE type = 'table' AND substr(name, 1, 7) != 'sqlite_' "
                "ORDER BY name"
            )
        )
        return [row["name"] for row in rows]

    async def column_names(self, collection: str) -> list[str]:
        """Get the columns of a table in physical order.
        
        Returns:
            Column names (empty if the table does not exist)
        """
        rows = await self._engine.fetch_all(
            f"PRAGMA table_info({self._engine.quote(collection)})"
        )
        return [row["name"] for row in rows]
