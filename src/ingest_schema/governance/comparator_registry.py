from typing import Dict, Iterable, List, Optional

from ingest_schema.canonical.field import ColumnDefinition
from ingest_schema.governance.comparators import (
    STANDARD_COMPARATORS,
    ColumnComparator,
    CompareColumnResult,
)
from ingest_schema.utils.exceptions import ComparatorNotFoundError


class ComparatorRegistry:
    """
    Maps destination types to the comparators able to handle them.

    Comparators are registered explicitly, once, by whoever composes
    the engine. Lookup picks the most specific comparator:
    1. resolved-type match before candidate-set match
    2. fewest (source x destination) pairs
    3. registration order
    """

    def __init__(self, comparators: Optional[Iterable[ColumnComparator]] = None):
        self._by_destination: Dict[str, List[ColumnComparator]] = {}
        self._order: Dict[int, int] = {}
        for comparator in comparators or ():
            self.register(comparator)

    def register(self, comparator: ColumnComparator):
        if not comparator.destination_types:
            raise ValueError(
                f"{type(comparator).__name__} declares no destination types"
            )

        self._order.setdefault(id(comparator), len(self._order))
        for destination in comparator.destination_types:
            self._by_destination.setdefault(destination, []).append(comparator)

    def comparators_for(self, destination_type: str) -> List[ColumnComparator]:
        return list(self._by_destination.get(destination_type, []))

    def find(
        self,
        file_column: ColumnDefinition,
        table_column: ColumnDefinition,
    ) -> ColumnComparator:
        candidates = [
            c for c in self._by_destination.get(table_column.data_type, [])
            if c.supports(file_column, table_column)
        ]

        if not candidates:
            raise ComparatorNotFoundError(
                str(file_column.data_type), str(table_column.data_type)
            )

        return min(
            candidates,
            key=lambda c: (
                0 if c.supports_exactly(file_column) else 1,
                c.specificity,
                self._order[id(c)],
            ),
        )

    def compare(
        self,
        file_column: ColumnDefinition,
        table_column: ColumnDefinition,
    ) -> CompareColumnResult:
        return self.find(file_column, table_column).compare(file_column, table_column)


def default_registry() -> ComparatorRegistry:
    """
    Registry holding the standard comparator set.
    A fresh instance per call; nothing is shared between callers.
    """
    return ComparatorRegistry(cls() for cls in STANDARD_COMPARATORS)
