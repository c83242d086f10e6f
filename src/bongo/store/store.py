"""Document store facade for Bongo."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, TypeVar, Union, overload

from bongo.core.exceptions import (
    CollectionNotFoundError,
    DocumentValidationError,
    EngineError,
    StoreConnectionError,
)
from bongo.ids.generator import generate_id
from bongo.query.models import DeleteResult, InsertResult, QueryOptions, UpdateResult
from bongo.query.translator import QueryTranslator
from bongo.schema.manager import SchemaManager
from bongo.schema.models import ID_FIELD, KEY_FIELD, BongoDoc, FieldDeclaration
from bongo.schema.registry import FieldRegistry
from bongo.settings.store import StoreSettings
from bongo.storage.engine import StorageEngine

logger = logging.getLogger(__name__)

SQLITE_SUFFIX = ".sqlite"

DocT = TypeVar("DocT", bound=BongoDoc)

Document = dict[str, Any]
Shape = Union[str, type[BongoDoc], None]


def normalize_path(path: Union[str, os.PathLike]) -> str:
    """Append the `.sqlite` suffix unless the path already has it."""
    path = os.fspath(path)
    if not path.endswith(SQLITE_SUFFIX):
        path += SQLITE_SUFFIX
    return path


def _to_document(data: Union[Mapping[str, Any], BongoDoc]) -> Document:
    if isinstance(data, BongoDoc):
        return data.to_document()
    return dict(data)


class Bongo:
    """Document store over a single SQLite file.

    Bongo provides:
    - Collection creation and additive migration from registered shapes
    - Index creation
    - Document CRUD with equality filters, sort and paging
    - Database drop and truncate

    Example:
        ```python
        registry = FieldRegistry()
        registry.register_shape("users", [
            FieldDeclaration(name="name"),
            FieldDeclaration(name="age", type=StorageType.INTEGER),
        ])

        async with Bongo("data/app", registry=registry) as bongo:
            await bongo.create_collection("users")
            result = await bongo.insert("users", {"name": "Ann", "age": 30})
            docs = await bongo.find("users", {"name": "Ann"})
            await bongo.update("users", {"name": "Ann"}, {"age": 31})
            await bongo.delete_one("users", {"name": "Ann"})
        ```
    """

    generate_id = staticmethod(generate_id)

    def __init__(
        self,
        path: Optional[Union[str, os.PathLike]] = None,
        *,
        registry: Optional[FieldRegistry] = None,
        settings: Optional[StoreSettings] = None,
    ) -> None:
        """Initialize the store.

        Args:
            path: Storage file path (`.sqlite` appended if missing)
            registry: Field registry holding the document shapes
            settings: Store settings (uses defaults if not provided)

        Raises:
            StoreConnectionError: If the parent directory cannot be created
        """
        self._settings = settings or StoreSettings()
        self.path = normalize_path(path if path is not None else self._settings.path)
        self.registry = registry or FieldRegistry()
        self.collection_shapes: dict[str, str] = {}

        try:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error(f"bongo error: unable to open path {self.path}")
            raise StoreConnectionError(
                f"Unable to create directory for {self.path}: {exc}",
                path=self.path,
            ) from exc

        self._engine = StorageEngine(self.path, echo=self._settings.echo_sql)
        self._schema = SchemaManager(self._engine)
        self._translator = QueryTranslator()

    @property
    def engine(self) -> StorageEngine:
        return self._engine

    @property
    def schema(self) -> SchemaManager:
        return self._schema

    async def initialize(self) -> None:
        """Open the storage file.

        Raises:
            StoreConnectionError: If the file cannot be opened or created
        """
        await self._engine.open()
        logger.info(f"Bongo store opened at {self.path}")

    async def close(self) -> None:
        """Close the storage connection."""
        await self._engine.close()
        logger.info(f"Bongo store closed at {self.path}")

    async def __aenter__(self) -> "Bongo":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Collections

    async def create_collection_raw(
        self,
        collection: str,
        fields: Iterable[FieldDeclaration],
    ) -> None:
        """Create or extend a collection from explicit declarations.

        Args:
            collection: Collection name
            fields: Field declarations in column-add order

        Raises:
            SchemaError: If the table, a column or an index cannot be created
        """
        await self._schema.ensure_collection(collection, fields)

    async def create_collection(self, collection: str, shape: Shape = None) -> None:
        """Create or extend a collection from a registered shape.

        Args:
            collection: Collection name
            shape: Shape name or BongoDoc subclass (defaults to the collection name);
                a model that is not registered yet is registered first

        Raises:
            SchemaError: If the table, a column or an index cannot be created
        """
        shape_name = self._resolve_shape(collection, shape)
        await self.create_collection_raw(
            collection,
            self.registry.declarations_for(shape_name),
        )
        self.collection_shapes[collection] = shape_name
        logger.debug(f"Collection {collection} uses shape {shape_name}")

    async def alter_collection(self, collection: str, shape: Shape = None) -> str:
        """Create `<collection>_tmp` from a shape to migrate data into.

        Only the empty target table is created; copying rows is up to
        the caller.

        Returns:
            Name of the new collection
        """
        tmp_collection = f"{collection}_tmp"
        await self.create_collection(
            tmp_collection,
            shape if shape is not None else self.collection_shapes.get(collection, collection),
        )
        return tmp_collection

    def _resolve_shape(self, collection: str, shape: Shape) -> str:
        if shape is None:
            return collection
        if isinstance(shape, str):
            return shape
        if shape.__name__ not in self.registry:
            self.registry.register_model(shape)
        return shape.__name__

    async def ensure_index(
        self,
        collection: str,
        fields: Sequence[str],
        unique: bool = False,
    ) -> str:
        """Create an index if it does not exist.

        Returns:
            The index name
        """
        return await self._schema.ensure_index(collection, fields, unique)

    async def list_collections(self) -> list[str]:
        """Get the names of all collections in the store."""
        return await self._schema.list_collections()

    # Reads

    @overload
    async def find(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
        model: None = None,
    ) -> list[Document]: ...

    @overload
    async def find(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
        model: type[DocT] = ...,
    ) -> list[DocT]: ...

    async def find(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
        model: Optional[type[BongoDoc]] = None,
    ) -> list[Any]:
        """Find documents matching an equality filter.

        Args:
            collection: Collection name
            query: Field to value, AND-ed (empty matches every document)
            options: Sort, limit and offset
            model: Validate each document into this model

        Returns:
            Matching documents, each with its derived `key`

        Raises:
            CollectionNotFoundError: If the collection does not exist
            EngineError: If the engine rejects the query
        """
        stmt = self._translator.build_find(collection, query, options)

        try:
            rows = await self._engine.fetch_all(stmt)
        except EngineError as exc:
            logger.debug(f"find error: collection {collection}: {exc.message}")
            raise

        documents = [self._translator.to_document(row) for row in rows]

        if model is not None:
            return [model.model_validate(doc) for doc in documents]
        return documents

    async def find_one(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
        model: Optional[type[BongoDoc]] = None,
    ) -> Optional[Any]:
        """Find the first matching document.

        Returns:
            The first document per the sort order, or None if nothing matches
        """
        options = (options or QueryOptions()).model_copy(update={"limit": 1})
        results = await self.find(collection, query, options, model=model)
        return results[0] if results else None

    # Writes

    async def insert(
        self,
        collection: str,
        data: Union[Mapping[str, Any], BongoDoc],
    ) -> InsertResult:
        """Insert one document.

        An `_id` is generated when missing; a given `_id` is kept as is.
        The derived `key` is never stored.

        Returns:
            Result holding the inserted id
        """
        document = _to_document(data)
        document.pop(KEY_FIELD, None)
        if not document.get(ID_FIELD):
            document[ID_FIELD] = generate_id()

        await self._engine.execute(self._translator.build_insert(collection, document))
        return InsertResult(inserted_id=document[ID_FIELD])

    async def insert_one(
        self,
        collection: str,
        data: Union[Mapping[str, Any], BongoDoc],
    ) -> InsertResult:
        """Alias of insert()."""
        return await self.insert(collection, data)

    async def update(
        self,
        collection: str,
        query: Mapping[str, Any],
        data: Union[Mapping[str, Any], BongoDoc],
    ) -> UpdateResult:
        """Set fields on every document matching the filter.

        Matching ids are resolved first, then each row is updated by id.
        Rows are not updated atomically: a failure leaves earlier rows
        updated and later ones untouched.

        Args:
            collection: Collection name
            query: Equality filter
            data: Field to new value

        Returns:
            Matched and modified counts

        Raises:
            DocumentValidationError: If the update would change `_id`
            CollectionNotFoundError: If the collection does not exist
        """
        values = _to_document(data)
        values.pop(KEY_FIELD, None)

        docs = await self.find(collection, query)

        if ID_FIELD in values:
            new_id = values.pop(ID_FIELD)
            if any(doc[ID_FIELD] != new_id for doc in docs):
                raise DocumentValidationError("_id is immutable", field=ID_FIELD)

        if not values:
            return UpdateResult(matched_count=len(docs), modified_count=0)

        modified = 0
        for doc in docs:
            stmt = self._translator.build_update_by_id(collection, doc[ID_FIELD], values)
            try:
                modified += await self._engine.execute(stmt)
            except EngineError:
                logger.error(f"update error: {collection} {dict(query)} {values}")
                raise

        return UpdateResult(matched_count=len(docs), modified_count=modified)

    async def delete_many(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> DeleteResult:
        """Delete every matching document.

        A collection that does not exist counts as zero deletions.

        Returns:
            Number of deleted documents
        """
        try:
            docs = await self.find(collection, query, options)

            for doc in docs:
                await self._engine.execute(
                    self._translator.build_delete_by_id(collection, doc[ID_FIELD])
                )
        except CollectionNotFoundError as exc:
            logger.warning(f"bongo.delete_many: {exc.message}")
            return DeleteResult(deleted_count=0)

        return DeleteResult(deleted_count=len(docs))

    async def delete_one(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> DeleteResult:
        """Delete the first matching document.

        Returns:
            deleted_count of 1, or 0 when nothing matched

        Raises:
            CollectionNotFoundError: If the collection does not exist
        """
        doc = await self.find_one(collection, query, options)

        if doc is None:
            return DeleteResult(deleted_count=0)

        await self._engine.execute(
            self._translator.build_delete_by_id(collection, doc[ID_FIELD])
        )
        return DeleteResult(deleted_count=1)

    # Database

    async def drop_database(self) -> None:
        """Delete the storage file and reopen a fresh, empty one."""
        await self._engine.close()
        Path(self.path).unlink(missing_ok=True)
        self.collection_shapes.clear()

        self._engine = StorageEngine(self.path, echo=self._settings.echo_sql)
        self._schema = SchemaManager(self._engine)
        await self._engine.open()
        logger.info(f"Bongo store dropped and recreated at {self.path}")

    async def truncate_all(self) -> None:
        """Remove every document from every collection, keeping the schema."""
        for collection in await self._schema.list_collections():
            await self._engine.execute(self._translator.build_truncate(collection))
            logger.debug(f"Truncated {collection}")

    def __repr__(self) -> str:
        return f"Bongo(path={self.path!r})"


class BongoService:
    """Base for services that own a Bongo store."""

    def __init__(
        self,
        path: Optional[Union[str, os.PathLike]] = None,
        *,
        registry: Optional[FieldRegistry] = None,
        settings: Optional[StoreSettings] = None,
    ) -> None:
        self.bongo = Bongo(path, registry=registry, settings=settings)
