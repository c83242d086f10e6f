"""Translate document-style queries into SQLAlchemy Core statements.

Statements are built over lightweight `table()`/`column()` clauses, so
identifiers are quoted by the dialect and every value is a bound
parameter.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy import (
    Delete,
    Insert,
    Select,
    Update,
    column,
    delete,
    insert,
    literal_column,
    select,
    table,
    update,
)
from sqlalchemy.sql import TableClause

from bongo.ids.generator import derive_key
from bongo.query.models import QueryOptions
from bongo.schema.models import ID_FIELD, KEY_FIELD


class QueryTranslator:
    """Builds read and write statements for one collection at a time.
    
    Example:
        ```python
        translator = QueryTranslator()
        stmt = translator.build_find(
            "users",
            {"name": "Ann"},
            QueryOptions(sort={"age": -1}, limit=10),
        )
        rows = await engine.fetch_all(stmt)
        docs = [translator.to_document(row) for row in rows]
        ```
    """

    @staticmethod
    def table_clause(collection: str, *columns: str) -> TableClause:
        """Lightweight table with the given columns (and `_id`)."""
        names = dict.fromkeys((ID_FIELD, *columns))
        return table(collection, *(column(name) for name in names))

    def build_find(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> Select:
        """Build a SELECT for an equality filter with sort and paging.
        
        Args:
            collection: Collection name
            query: Field to value; all pairs must match (empty = all rows)
            options: Sort, limit and offset
            
        Returns:
            SELECT statement
        """
        query = query or {}
        options = options or QueryOptions()
        
        sort = options.sort or {}
        target = self.table_clause(collection, *query.keys(), *sort.keys())
        stmt = select(literal_column("*")).select_from(target)
        
        for field, value in query.items():
            if value is None:
                stmt = stmt.where(target.c[field].is_(None))
            else:
                stmt = stmt.where(target.c[field] == value)
        
        for field, direction in sort.items():
            stmt = stmt.order_by(
                target.c[field].asc() if direction > 0 else target.c[field].desc()
            )
        
        if options.limit is not None:
            stmt = stmt.limit(options.limit)
        
        if options.offset is not None:
            stmt = stmt.offset(options.offset)
        
        return stmt

    def build_insert(self, collection: str, document: Mapping[str, Any]) -> Insert:
        """Build a single-row INSERT whose columns are the document's keys."""
        target = self.table_clause(collection, *document.keys())
        return insert(target).values(
            {target.c[field]: value for field, value in document.items()}
        )

    def build_update_by_id(
        self,
        collection: str,
        document_id: str,
        values: Mapping[str, Any],
    ) -> Update:
        """Build an UPDATE setting the given values on one row."""
        target = self.table_clause(collection, *values.keys())
        return (
            update(target)
            .where(target.c[ID_FIELD] == document_id)
            .values({target.c[field]: value for field, value in values.items()})
        )

    def build_delete_by_id(self, collection: str, document_id: str) -> Delete:
        """Build a DELETE for one row."""
        target = self.table_clause(collection)
        return delete(target).where(target.c[ID_FIELD] == document_id)

    def build_truncate(self, collection: str) -> Delete:
        """Build a DELETE removing every row of a table."""
        return delete(table(collection))

    @staticmethod
    def to_document(row: Mapping[str, Any]) -> dict[str, Any]:
        """Convert a result row to a document with its derived key."""
        document = dict(row)
        document_id = document.get(ID_FIELD)
        if document_id is not None:
            document[KEY_FIELD] = derive_key(str(document_id))
        return document