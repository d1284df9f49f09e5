class IngestSchemaError(Exception):
    """
    Base exception for all ingest-schema errors
    """
    pass


class SchemaValidationError(IngestSchemaError):
    """
    Raised when a table schema is malformed
    (duplicate column names, dangling constraint references)
    """
    pass


class UnsupportedTypeError(IngestSchemaError):
    """
    Raised for unknown canonical type names or candidate sets
    that no canonical type family can satisfy
    """
    pass


class ComparatorNotFoundError(IngestSchemaError):
    """
    Raised when no registered comparator handles a column pairing
    """

    def __init__(self, source_type: str, destination_type: str):
        super().__init__(
            f"No comparator available for {source_type} -> {destination_type}"
        )
        self.source_type = source_type
        self.destination_type = destination_type


class ConfigError(IngestSchemaError):
    """
    Raised when engine configuration is invalid
    """
    pass


class TypedValueError(IngestSchemaError, ValueError):
    """
    Raised when a literal cannot be converted to its resolved type
    """
    pass
