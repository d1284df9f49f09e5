from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import FrozenSet, Iterable, Optional, Set
import re

from ingest_schema.canonical import types as T
from ingest_schema.inference.numeric_inference import parse_decimal, parse_integer
from ingest_schema.utils.exceptions import ConfigError

DEFAULT_TRUE_TOKENS = frozenset(("true", "yes", "y", "t", "1"))
DEFAULT_FALSE_TOKENS = frozenset(("false", "no", "n", "f", "0"))

DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%m/%d/%Y", "%d/%m/%Y")

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?$")

TIMESTAMP_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[T ]"
    r"(\d{1,2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?)"
    r"\s*(Z|[+-]\d{2}:?\d{2})?$"
)


def is_ascii_text(value: str) -> bool:
    return value.isascii()


def normalize_tokens(tokens: Iterable) -> FrozenSet[str]:
    """
    YAML turns bare true/false/yes/no into booleans; fold everything
    back to lower-case text.
    """
    if isinstance(tokens, str):
        tokens = [tokens]
    return frozenset(str(v).strip().lower() for v in tokens)


@dataclass(frozen=True)
class BooleanLexicon:
    """
    Boolean literals, split by the value they stand for.
    Matching is case-insensitive.
    """
    true_tokens: FrozenSet[str] = DEFAULT_TRUE_TOKENS
    false_tokens: FrozenSet[str] = DEFAULT_FALSE_TOKENS

    def __post_init__(self):
        true_tokens = normalize_tokens(self.true_tokens)
        false_tokens = normalize_tokens(self.false_tokens)

        if not true_tokens or not false_tokens:
            raise ConfigError("Boolean lexicon needs at least one true and one false token")

        overlap = true_tokens & false_tokens
        if overlap:
            raise ConfigError(
                f"Boolean tokens cannot be both true and false: {sorted(overlap)}"
            )

        object.__setattr__(self, "true_tokens", true_tokens)
        object.__setattr__(self, "false_tokens", false_tokens)

    @property
    def tokens(self) -> FrozenSet[str]:
        return self.true_tokens | self.false_tokens

    def __contains__(self, token) -> bool:
        return str(token).strip().lower() in self.tokens

    def parse(self, token: str) -> Optional[bool]:
        key = token.strip().lower()
        if key in self.true_tokens:
            return True
        if key in self.false_tokens:
            return False
        return None


DEFAULT_BOOLEAN_LEXICON = BooleanLexicon()


def is_boolean(value: str, lexicon: BooleanLexicon = DEFAULT_BOOLEAN_LEXICON) -> bool:
    """
    Check if value is a boolean literal of the lexicon.
    """
    return value.strip().lower() in lexicon


# ------------------------------------------------------------------
# Date / time grammar
# ------------------------------------------------------------------

def parse_date(value: str) -> Optional[date]:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_time(value: str) -> Optional[time]:
    m = TIME_PATTERN.fullmatch(value)
    if not m:
        return None

    hour, minute, second, fraction = m.groups()
    micros = int((fraction or "0").ljust(6, "0"))
    try:
        return time(int(hour), int(minute), int(second or 0), micros)
    except ValueError:
        return None


def _parse_offset(text: Optional[str]) -> timezone:
    # Naive timestamps are read as UTC
    if not text or text == "Z":
        return timezone.utc

    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * offset)


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse an ISO-like timestamp into a timezone-aware datetime.
    Returns None if invalid.
    """
    m = TIMESTAMP_PATTERN.fullmatch(value)
    if not m:
        return None

    date_part, time_part, offset = m.groups()
    try:
        d = datetime.strptime(date_part, "%Y-%m-%d").date()
        t = parse_time(time_part)
        if t is None:
            return None
        return datetime.combine(d, t, tzinfo=_parse_offset(offset))
    except ValueError:
        return None


# ------------------------------------------------------------------
# Candidate types per family
# ------------------------------------------------------------------

def guess_text_types(value: str) -> Set[str]:
    ret = set(T.UNICODE_TEXT_TYPES)
    if is_ascii_text(value):
        ret.update(T.ASCII_TEXT_TYPES)
    return ret


def guess_int_types(value: str) -> Set[str]:
    """
    Full ladder of integer widths the literal fits, not just the tightest.
    """
    n = parse_integer(value)
    if n is None:
        return set()

    return {
        type_name
        for type_name, (low, high) in T.INTEGER_RANGES.items()
        if low <= n <= high
    }


def guess_float_types(value: str) -> Set[str]:
    d = parse_decimal(value)
    if d is None:
        return set()

    ret = {T.DECIMAL}
    magnitude = abs(d)
    if magnitude <= T.DOUBLE_MAX:
        ret.add(T.DOUBLE)
    if magnitude <= T.FLOAT_MAX:
        ret.add(T.FLOAT)
    return ret


def guess_temporal_types(value: str) -> Set[str]:
    ret = set()
    if parse_timestamp(value) is not None:
        ret.add(T.TIMESTAMP_WITH_TIMEZONE)
    if parse_date(value) is not None:
        ret.add(T.DATE)
    if parse_time(value) is not None:
        ret.add(T.TIME)
    return ret


def probe_types(
    value: Optional[str],
    boolean_lexicon: BooleanLexicon = DEFAULT_BOOLEAN_LEXICON,
) -> Set[str]:
    """
    Every canonical type the cell text is a valid literal for.

    Rules are evaluated independently, so a value usually satisfies
    several (e.g. "1" is text, every integer width, every floating
    type and a boolean). Null / blank cells carry no opinion and
    return an empty set.
    """
    if value is None:
        return set()

    value = str(value).strip()
    if not value:
        return set()

    ret = guess_text_types(value)
    ret.update(guess_int_types(value))
    ret.update(guess_float_types(value))
    if is_boolean(value, boolean_lexicon):
        ret.add(T.BOOLEAN)
    ret.update(guess_temporal_types(value))
    return ret
