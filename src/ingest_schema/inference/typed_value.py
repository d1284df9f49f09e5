from typing import Any, Optional

from ingest_schema.canonical import types as T
from ingest_schema.inference.numeric_inference import parse_decimal, parse_integer
from ingest_schema.inference.type_probe import (
    DEFAULT_BOOLEAN_LEXICON,
    BooleanLexicon,
    parse_date,
    parse_time,
    parse_timestamp,
)
from ingest_schema.utils.exceptions import TypedValueError


def _fail(value: str, type_name: str):
    raise TypedValueError(f"Value '{value}' is not a valid {type_name} literal")


def _to_integer(value: str, type_name: str) -> int:
    n = parse_integer(value)
    low, high = T.INTEGER_RANGES[type_name]
    if n is None or not low <= n <= high:
        _fail(value, type_name)
    return n


def _to_boolean(value: str, lexicon: BooleanLexicon) -> bool:
    parsed = lexicon.parse(value)
    if parsed is None:
        _fail(value, T.BOOLEAN)
    return parsed


def to_typed_value(
    value: Any,
    type_name: str,
    boolean_lexicon: BooleanLexicon = DEFAULT_BOOLEAN_LEXICON,
) -> Optional[Any]:
    """
    Convert raw cell text into the Python value a writer binds for
    the resolved canonical type.

    Non-text values pass through untouched. Blank text becomes None
    for every non-text type.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value

    type_name = T.normalize_type(type_name)
    if type_name in T.TEXT_TYPES:
        return value

    text = value.strip()
    if not text:
        return None

    if type_name in T.INTEGER_TYPES:
        return _to_integer(text, type_name)

    if type_name in T.FLOAT_TYPES:
        d = parse_decimal(text)
        if d is None:
            _fail(text, type_name)
        if type_name == T.DECIMAL:
            return d
        limit = T.FLOAT_MAX if type_name == T.FLOAT else T.DOUBLE_MAX
        if abs(d) > limit:
            _fail(text, type_name)
        return float(d)

    if type_name == T.BOOLEAN:
        return _to_boolean(text, boolean_lexicon)

    if type_name in T.TIMESTAMP_TYPES:
        parsed = parse_timestamp(text)
    elif type_name == T.DATE:
        parsed = parse_date(text)
    elif type_name == T.TIME:
        parsed = parse_time(text)
    else:
        # BINARY / VARBINARY
        return text.encode("utf-8")

    if parsed is None:
        _fail(text, type_name)
    return parsed
