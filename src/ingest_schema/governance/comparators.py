from dataclasses import dataclass
from typing import FrozenSet, Optional

from ingest_schema.canonical import types as T
from ingest_schema.canonical.field import ColumnDefinition


@dataclass
class CompareColumnResult:
    """
    Outcome of comparing one file column against one table column.

    is_type_matched: destination type is identical to the source type
    can_load: source data fits the destination without structural
              rejection (possibly with lossy narrowing)
    """
    is_type_matched: bool
    can_load: bool

    comparator: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "is_type_matched": self.is_type_matched,
            "can_load": self.can_load,
            "comparator": self.comparator,
            "reason": self.reason,
        }


class ColumnComparator:
    """
    Decides whether data of a file column can go into a table column.

    Each comparator declares the source / destination type pairs it
    handles. When match_candidates is set the comparator is also
    selected for file columns whose candidate set (not only the
    resolved type) meets source_types.
    """

    source_types: FrozenSet[str] = frozenset()
    destination_types: FrozenSet[str] = frozenset()
    match_candidates = False

    @property
    def specificity(self) -> int:
        # Smaller means more specific
        return len(self.source_types) * len(self.destination_types)

    def supports(self, file_column: ColumnDefinition, table_column: ColumnDefinition) -> bool:
        return table_column.data_type in self.destination_types and (
            self.supports_exactly(file_column)
            or (self.match_candidates and bool(file_column.possible_types & self.source_types))
        )

    def supports_exactly(self, file_column: ColumnDefinition) -> bool:
        return file_column.data_type in self.source_types

    def compare(
        self,
        file_column: ColumnDefinition,
        table_column: ColumnDefinition,
    ) -> CompareColumnResult:
        raise NotImplementedError

    def _result(self, is_type_matched: bool, can_load: bool, reason: Optional[str] = None):
        return CompareColumnResult(
            is_type_matched=is_type_matched,
            can_load=can_load,
            comparator=type(self).__name__,
            reason=reason,
        )


def _candidate_or_resolved(file_column: ColumnDefinition, wanted) -> bool:
    return (
        file_column.data_type in wanted
        or bool(file_column.possible_types.intersection(wanted))
    )


# ------------------------------------------------------------------
# Numeric
# ------------------------------------------------------------------

class IntToIntComparator(ColumnComparator):
    source_types = frozenset(T.INTEGER_TYPES)
    destination_types = frozenset(T.INTEGER_TYPES)

    def compare(self, file_column, table_column):
        src = T.INTEGER_TYPES.index(file_column.data_type)
        dst = T.INTEGER_TYPES.index(table_column.data_type)
        return self._result(
            file_column.data_type == table_column.data_type,
            dst >= src,
            None if dst >= src else "destination integer is narrower than source",
        )


class FloatToFloatComparator(ColumnComparator):
    source_types = frozenset(T.FLOAT_TYPES)
    destination_types = frozenset(T.FLOAT_TYPES)

    def compare(self, file_column, table_column):
        src = T.FLOAT_TYPES.index(file_column.data_type)
        dst = T.FLOAT_TYPES.index(table_column.data_type)
        return self._result(
            file_column.data_type == table_column.data_type,
            dst >= src,
            None if dst >= src else "destination floating type is narrower than source",
        )


class IntToFloatComparator(ColumnComparator):
    source_types = frozenset(T.INTEGER_TYPES)
    destination_types = frozenset(T.FLOAT_TYPES)

    def compare(self, file_column, table_column):
        return self._result(False, True)


class ToIntegerComparator(ColumnComparator):
    """
    Non-integer source into an integer column: only when every sampled
    value also fitted the destination width.
    """

    source_types = T.ALL_TYPES - frozenset(T.INTEGER_TYPES)
    destination_types = frozenset(T.INTEGER_TYPES)

    def compare(self, file_column, table_column):
        can_load = table_column.data_type in file_column.possible_types
        return self._result(
            False,
            can_load,
            None if can_load else f"sampled values do not fit {table_column.data_type}",
        )


class ToFloatComparator(ColumnComparator):
    source_types = frozenset(T.BOOLEAN_TYPES + T.TEMPORAL_TYPES + T.TEXT_TYPES + T.BINARY_TYPES)
    destination_types = frozenset(T.FLOAT_TYPES)

    def compare(self, file_column, table_column):
        can_load = table_column.data_type in file_column.possible_types
        return self._result(
            False,
            can_load,
            None if can_load else f"sampled values are not {table_column.data_type} literals",
        )


# ------------------------------------------------------------------
# Boolean
# ------------------------------------------------------------------

class ToBooleanComparator(ColumnComparator):
    source_types = T.ALL_TYPES
    destination_types = frozenset(T.BOOLEAN_TYPES)

    def compare(self, file_column, table_column):
        can_load = _candidate_or_resolved(file_column, T.BOOLEAN_TYPES)
        return self._result(
            file_column.data_type == T.BOOLEAN,
            can_load,
            None if can_load else "sampled values are not boolean literals",
        )


# ------------------------------------------------------------------
# Temporal
# ------------------------------------------------------------------

class TimestampToTimestampComparator(ColumnComparator):
    source_types = frozenset(T.TIMESTAMP_TYPES)
    destination_types = frozenset(T.TIMESTAMP_TYPES)

    def compare(self, file_column, table_column):
        return self._result(file_column.data_type == table_column.data_type, True)


class ToTimestampComparator(ColumnComparator):
    """
    Text / temporal into a timestamp: never a type match, loadable only
    when date, time or timestamp values were seen.
    """

    source_types = T.ALL_TYPES - frozenset(T.TIMESTAMP_TYPES)
    destination_types = frozenset(T.TIMESTAMP_TYPES)
    match_candidates = True

    def compare(self, file_column, table_column):
        can_load = _candidate_or_resolved(file_column, T.TEMPORAL_TYPES)
        return self._result(
            False,
            can_load,
            None if can_load else "no date/time values in sample",
        )


class ToDateComparator(ColumnComparator):
    source_types = T.ALL_TYPES
    destination_types = frozenset((T.DATE,))
    match_candidates = True

    def compare(self, file_column, table_column):
        can_load = _candidate_or_resolved(file_column, (T.DATE,) + T.TIMESTAMP_TYPES)
        return self._result(
            file_column.data_type == T.DATE,
            can_load,
            None if can_load else "no date values in sample",
        )


class ToTimeComparator(ColumnComparator):
    source_types = T.ALL_TYPES
    destination_types = frozenset((T.TIME,))
    match_candidates = True

    def compare(self, file_column, table_column):
        can_load = _candidate_or_resolved(file_column, (T.TIME,))
        return self._result(
            file_column.data_type == T.TIME,
            can_load,
            None if can_load else "no time values in sample",
        )


# ------------------------------------------------------------------
# Text / binary
# ------------------------------------------------------------------

class ToTextComparator(ColumnComparator):
    """
    Anything can be written as text, unless non-ASCII data goes into an
    ASCII-only column or a bounded column is too short.
    """

    source_types = T.ALL_TYPES
    destination_types = frozenset(T.TEXT_TYPES)

    def compare(self, file_column, table_column):
        matched = file_column.data_type == table_column.data_type
        file_mod = file_column.type_modifier

        if file_mod.contains_non_ascii and table_column.data_type in T.ASCII_TEXT_TYPES:
            return self._result(matched, False, "non-ASCII data into ASCII-only column")

        max_length = table_column.type_modifier.max_length
        if (
            table_column.data_type in T.BOUNDED_TEXT_TYPES
            and max_length
            and file_mod.max_length > max_length
        ):
            return self._result(
                matched,
                False,
                f"values up to {file_mod.max_length} characters exceed length {max_length}",
            )

        return self._result(matched, True)


class ToBinaryComparator(ColumnComparator):
    source_types = T.ALL_TYPES
    destination_types = frozenset(T.BINARY_TYPES)

    def compare(self, file_column, table_column):
        can_load = file_column.data_type in T.BINARY_TYPES
        return self._result(
            file_column.data_type == table_column.data_type,
            can_load,
            None if can_load else "only binary data loads into binary columns",
        )


STANDARD_COMPARATORS = (
    IntToIntComparator,
    FloatToFloatComparator,
    IntToFloatComparator,
    ToIntegerComparator,
    ToFloatComparator,
    ToBooleanComparator,
    TimestampToTimestampComparator,
    ToTimestampComparator,
    ToDateComparator,
    ToTimeComparator,
    ToTextComparator,
    ToBinaryComparator,
)
