"""Bongo Exception Hierarchy"""


class BongoError(Exception):
    """Base exception for all Bongo errors."""
    
    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


class StoreConnectionError(BongoError):
    """Storage file could not be opened or created."""
    
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class EngineError(BongoError):
    """The storage engine rejected a statement."""
    
    def __init__(self, message: str, statement: str | None = None):
        super().__init__(message)
        self.statement = statement


class CollectionNotFoundError(EngineError):
    """Statement targeted a table that does not exist."""
    
    def __init__(
        self,
        message: str,
        statement: str | None = None,
        collection: str | None = None,
    ):
        super().__init__(message, statement)
        self.collection = collection


class SchemaError(BongoError):
    """Table, column or index could not be created."""
    
    def __init__(
        self,
        message: str,
        collection: str | None = None,
        field: str | None = None,
    ):
        super().__init__(message)
        self.collection = collection
        self.field = field


class DocumentValidationError(BongoError):
    """Document content is not acceptable for the requested write."""
    
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
