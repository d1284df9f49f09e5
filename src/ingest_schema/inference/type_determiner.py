from typing import Dict, Optional, Sequence, Set

from ingest_schema.canonical import types as T
from ingest_schema.canonical.field import ColumnDefinition, TypeModifier
from ingest_schema.utils.exceptions import ConfigError, UnsupportedTypeError


class TypeStrategy:
    WIDEST = "WIDEST"
    NARROWEST = "NARROWEST"

    @classmethod
    def is_valid(cls, strategy: str) -> bool:
        return strategy in {cls.WIDEST, cls.NARROWEST}


def _first_present(types: Set[str], preference: Sequence[str]) -> Optional[str]:
    for t in preference:
        if t in types:
            return t
    return None


class TypeDeterminer:
    """
    Resolves a column's candidate set into exactly one canonical type.

    Families are tried in a fixed precedence:
    numeric -> boolean -> temporal -> text -> binary.
    Subclasses only decide which member of a family wins.
    """

    name = None

    # Preference lists, most preferred first
    INTEGER_PREFERENCE: Sequence[str] = ()
    FLOAT_PREFERENCE: Sequence[str] = ()
    TEMPORAL_PREFERENCE: Sequence[str] = (
        T.TIMESTAMP_WITH_TIMEZONE,
        T.TIMESTAMP,
        T.DATE,
        T.TIME,
    )

    def determine_type(self, column: ColumnDefinition) -> str:
        types = column.possible_types
        modifier = column.type_modifier

        if not types:
            # Column never had a non-null value
            return T.NCLOB if modifier.contains_non_ascii else T.CLOB

        if len(types) == 1:
            return next(iter(types))

        if types.intersection(T.NUMERIC_TYPES):
            return self.determine_number_type(types)

        if T.BOOLEAN in types:
            return T.BOOLEAN

        temporal = _first_present(types, self.TEMPORAL_PREFERENCE)
        if temporal is not None:
            # Literal storage keeps the offset, so plain TIMESTAMP widens
            return T.TIMESTAMP_WITH_TIMEZONE if temporal == T.TIMESTAMP else temporal

        if types.intersection(T.TEXT_TYPES):
            return self.determine_text_type(modifier)

        if types.intersection(T.BINARY_TYPES):
            return T.VARBINARY

        raise UnsupportedTypeError(
            f"No canonical type fits column '{column.name}': {sorted(types)}"
        )

    def determine_number_type(self, types: Set[str]) -> str:
        integer = _first_present(types, self.INTEGER_PREFERENCE)
        if integer is not None:
            return integer
        return _first_present(types, self.FLOAT_PREFERENCE)

    def determine_text_type(self, modifier: TypeModifier) -> str:
        raise NotImplementedError


class WidestTypeDeterminer(TypeDeterminer):
    """
    Picks the type holding the largest range among the candidates,
    so no sampled value loses precision downstream.
    """

    name = TypeStrategy.WIDEST
    INTEGER_PREFERENCE = (T.BIGINT, T.INTEGER, T.SMALLINT, T.TINYINT)
    FLOAT_PREFERENCE = (T.DECIMAL, T.DOUBLE, T.FLOAT)

    def determine_text_type(self, modifier: TypeModifier) -> str:
        return T.NCLOB if modifier.contains_non_ascii else T.CLOB


class NarrowestTypeDeterminer(TypeDeterminer):
    """
    Picks the smallest adequate type, trusting the sample to be
    representative of the whole file.
    """

    name = TypeStrategy.NARROWEST
    INTEGER_PREFERENCE = (T.TINYINT, T.SMALLINT, T.INTEGER, T.BIGINT)
    FLOAT_PREFERENCE = (T.FLOAT, T.DOUBLE, T.DECIMAL)

    def determine_text_type(self, modifier: TypeModifier) -> str:
        return T.NVARCHAR if modifier.contains_non_ascii else T.VARCHAR


class DeterminerRegistry:
    """
    Maps strategy names to determiners, with optional
    per-column overrides.
    """

    def __init__(
        self,
        default_strategy: str = TypeStrategy.WIDEST,
        column_strategies: Optional[Dict[str, str]] = None,
    ):
        self._determiners: Dict[str, TypeDeterminer] = {}
        for determiner in (WidestTypeDeterminer(), NarrowestTypeDeterminer()):
            self.register(determiner)

        self.default_strategy = self._check(default_strategy)
        self.column_strategies = {
            column: self._check(strategy)
            for column, strategy in (column_strategies or {}).items()
        }

    def _check(self, strategy: str) -> str:
        key = str(strategy or "").upper()
        if key not in self._determiners:
            raise ConfigError(
                f"Unknown type strategy '{strategy}'. "
                f"Allowed: {sorted(self._determiners)}"
            )
        return key

    def register(self, determiner: TypeDeterminer):
        self._determiners[determiner.name] = determiner

    def get_determiner(self, column_name: Optional[str] = None) -> TypeDeterminer:
        strategy = self.column_strategies.get(column_name, self.default_strategy)
        return self._determiners[strategy]

    def get_strategy(self, strategy: str) -> TypeDeterminer:
        return self._determiners[self._check(strategy)]


def resolve(
    column: ColumnDefinition,
    strategy=TypeStrategy.WIDEST,
) -> ColumnDefinition:
    """
    Resolve a sampled column into its final canonical type.

    strategy may be a strategy name or a TypeDeterminer instance.
    """
    if isinstance(strategy, TypeDeterminer):
        determiner = strategy
    else:
        determiner = DeterminerRegistry().get_strategy(strategy)

    column.data_type = determiner.determine_type(column)
    return column
