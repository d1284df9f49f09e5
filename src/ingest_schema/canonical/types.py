from typing import Iterable, Set

from ingest_schema.utils.exceptions import UnsupportedTypeError

# Integer widths (8 / 16 / 32 / 64 bit)
TINYINT = "TINYINT"
SMALLINT = "SMALLINT"
INTEGER = "INTEGER"
BIGINT = "BIGINT"

# Floating point / arbitrary precision
FLOAT = "FLOAT"
DOUBLE = "DOUBLE"
DECIMAL = "DECIMAL"

BOOLEAN = "BOOLEAN"

DATE = "DATE"
TIME = "TIME"
TIMESTAMP = "TIMESTAMP"
TIMESTAMP_WITH_TIMEZONE = "TIMESTAMP_WITH_TIMEZONE"

# ASCII-only text
CHAR = "CHAR"
VARCHAR = "VARCHAR"
CLOB = "CLOB"

# Text that may contain non-ASCII characters
NCHAR = "NCHAR"
NVARCHAR = "NVARCHAR"
NCLOB = "NCLOB"

BINARY = "BINARY"
VARBINARY = "VARBINARY"


# ------------------------------------------------------------------
# Families (ordered narrow -> wide where width applies)
# ------------------------------------------------------------------
INTEGER_TYPES = (TINYINT, SMALLINT, INTEGER, BIGINT)
FLOAT_TYPES = (FLOAT, DOUBLE, DECIMAL)
NUMERIC_TYPES = INTEGER_TYPES + FLOAT_TYPES
BOOLEAN_TYPES = (BOOLEAN,)
TEMPORAL_TYPES = (TIME, DATE, TIMESTAMP, TIMESTAMP_WITH_TIMEZONE)
TIMESTAMP_TYPES = (TIMESTAMP, TIMESTAMP_WITH_TIMEZONE)
ASCII_TEXT_TYPES = (CHAR, VARCHAR, CLOB)
UNICODE_TEXT_TYPES = (NCHAR, NVARCHAR, NCLOB)
TEXT_TYPES = ASCII_TEXT_TYPES + UNICODE_TEXT_TYPES
BOUNDED_TEXT_TYPES = (CHAR, VARCHAR, NCHAR, NVARCHAR)
BINARY_TYPES = (BINARY, VARBINARY)

ALL_TYPES = frozenset(
    NUMERIC_TYPES
    + BOOLEAN_TYPES
    + TEMPORAL_TYPES
    + TEXT_TYPES
    + BINARY_TYPES
)

# Designated opaque large text used when observations cannot be reconciled.
FAIL_OPEN_TYPE = NCLOB

# Value-range limits used by the prober.
INTEGER_RANGES = {
    TINYINT: (-(2 ** 7), 2 ** 7 - 1),
    SMALLINT: (-(2 ** 15), 2 ** 15 - 1),
    INTEGER: (-(2 ** 31), 2 ** 31 - 1),
    BIGINT: (-(2 ** 63), 2 ** 63 - 1),
}
FLOAT_MAX = 3.4028234663852886e38
DOUBLE_MAX = 1.7976931348623157e308


def normalize_type(type_name: str) -> str:
    """
    Upper-case a canonical type name and make sure it is known.
    """
    if not type_name:
        raise UnsupportedTypeError("Canonical type name must not be empty")

    key = str(type_name).strip().upper()
    if key not in ALL_TYPES:
        raise UnsupportedTypeError(
            f"Unknown canonical type: '{type_name}'. "
            f"Allowed: {sorted(ALL_TYPES)}"
        )
    return key


def normalize_types(type_names: Iterable[str]) -> Set[str]:
    return {normalize_type(t) for t in type_names}
