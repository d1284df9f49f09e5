from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from ingest_schema.canonical.table import TableSchema, UniqueConstraint, normalize_name
from ingest_schema.governance.comparator_registry import ComparatorRegistry, default_registry
from ingest_schema.governance.comparators import CompareColumnResult
from ingest_schema.observability.logger import RequestTimer, log_event
from ingest_schema.utils.exceptions import ComparatorNotFoundError, SchemaValidationError


class MatchingPolicy:
    CASE_SENSITIVE = "CASE_SENSITIVE"
    CASE_INSENSITIVE = "CASE_INSENSITIVE"

    @classmethod
    def is_valid(cls, policy: str) -> bool:
        return policy in {cls.CASE_SENSITIVE, cls.CASE_INSENSITIVE}

    @classmethod
    def is_case_sensitive(cls, policy) -> bool:
        """
        Accept either a policy name or a plain boolean.
        """
        if isinstance(policy, bool):
            return policy
        if not cls.is_valid(policy):
            raise ValueError(
                f"Invalid matching policy '{policy}'. "
                f"Allowed values: CASE_SENSITIVE, CASE_INSENSITIVE"
            )
        return policy == cls.CASE_SENSITIVE


@dataclass
class SchemaDiffResult:
    """
    Aggregate verdict of a file schema against a table schema.
    """
    column_results: Dict[str, CompareColumnResult] = field(default_factory=dict)
    unmatched_columns: List[str] = field(default_factory=list)
    extra_destination_columns: List[str] = field(default_factory=list)

    constraints_matched: bool = True
    constraint_differences: List[Dict] = field(default_factory=list)

    @property
    def no_difference(self) -> bool:
        return not self.unmatched_columns and all(
            r.is_type_matched and r.can_load
            for r in self.column_results.values()
        )

    @property
    def can_load(self) -> bool:
        """
        Every file column has a destination able to receive it.
        """
        return not self.unmatched_columns and all(
            r.can_load for r in self.column_results.values()
        )

    def non_loadable_columns(self) -> List[str]:
        return [n for n, r in self.column_results.items() if not r.can_load]

    def to_dict(self) -> Dict:
        return {
            "no_difference": self.no_difference,
            "can_load": self.can_load,
            "columns": {n: r.to_dict() for n, r in self.column_results.items()},
            "unmatched_columns": self.unmatched_columns,
            "non_loadable_columns": self.non_loadable_columns(),
            "extra_destination_columns": self.extra_destination_columns,
            "constraints_matched": self.constraints_matched,
            "constraint_differences": self.constraint_differences,
        }


class SchemaDiff:
    """
    Compares a file-inferred schema with an existing table schema.

    The destination must be able to receive every file column; extra
    destination columns are tolerated and simply receive no data.
    """

    def __init__(
        self,
        file_schema: TableSchema,
        table_schema: TableSchema,
        case_sensitive=True,
        registry: Optional[ComparatorRegistry] = None,
    ):
        self.case_sensitive = MatchingPolicy.is_case_sensitive(case_sensitive)
        self.registry = registry or default_registry()

        file_schema.validate(self.case_sensitive)
        table_schema.validate(self.case_sensitive)

        unresolved = [
            f"{schema.name}.{c.name}"
            for schema in (file_schema, table_schema)
            for c in schema.columns
            if not c.is_resolved
        ]
        if unresolved:
            raise SchemaValidationError(f"Columns without a resolved type: {unresolved}")

        self.file_schema = file_schema
        self.table_schema = table_schema

    def _key(self, name: str) -> str:
        return normalize_name(name, self.case_sensitive)

    def diff(self) -> SchemaDiffResult:
        timer = RequestTimer()
        result = SchemaDiffResult()

        table_index = self.table_schema.column_index(self.case_sensitive)
        seen = set()

        for file_column in self.file_schema.columns:
            key = self._key(file_column.name)
            table_column = table_index.get(key)

            if table_column is None:
                result.unmatched_columns.append(file_column.name)
                continue

            seen.add(key)
            result.column_results[file_column.name] = self._compare_column(
                file_column, table_column
            )

        result.extra_destination_columns = [
            c.name for c in self.table_schema.columns
            if self._key(c.name) not in seen
        ]

        result.constraint_differences = self._diff_constraints()
        result.constraints_matched = not result.constraint_differences

        log_event("SCHEMA_DIFF_COMPLETED", {
            "file_table": self.file_schema.name,
            "table": self.table_schema.name,
            "no_difference": result.no_difference,
            "can_load": result.can_load,
            "unmatched_columns": len(result.unmatched_columns),
            "non_loadable_columns": len(result.non_loadable_columns()),
            "constraints_matched": result.constraints_matched,
            "duration_seconds": timer.duration(),
        })
        return result

    def _compare_column(self, file_column, table_column) -> CompareColumnResult:
        try:
            return self.registry.compare(file_column, table_column)
        except ComparatorNotFoundError as e:
            log_event("COMPARATOR_MISMATCH", {
                "column": file_column.name,
                "source_type": e.source_type,
                "destination_type": e.destination_type,
            })
            return CompareColumnResult(
                is_type_matched=False,
                can_load=False,
                comparator=None,
                reason=str(e),
            )

    # ------------------------------------------------------------------
    # Unique constraints
    # ------------------------------------------------------------------

    def _constraint_key(self, constraint: UniqueConstraint) -> Tuple[str, FrozenSet[str]]:
        return (
            self._key(constraint.name),
            frozenset(self._key(c) for c in constraint.columns),
        )

    def _diff_constraints(self) -> List[Dict]:
        differences = []

        file_pk = self.file_schema.primary_key
        table_pk = self.table_schema.primary_key
        file_pk_key = self._constraint_key(file_pk) if file_pk else None
        table_pk_key = self._constraint_key(table_pk) if table_pk else None

        if file_pk_key != table_pk_key:
            differences.append({
                "type": "PRIMARY_KEY_MISMATCH",
                "file": _describe(file_pk),
                "table": _describe(table_pk),
            })

        file_uniques = {
            self._constraint_key(c): c for c in self.file_schema.unique_constraints
        }
        table_uniques = {
            self._constraint_key(c): c for c in self.table_schema.unique_constraints
        }

        for key, constraint in file_uniques.items():
            if key not in table_uniques:
                differences.append({
                    "type": "UNIQUE_MISSING_IN_TABLE",
                    "constraint": _describe(constraint),
                })

        for key, constraint in table_uniques.items():
            if key not in file_uniques:
                differences.append({
                    "type": "UNIQUE_MISSING_IN_FILE",
                    "constraint": _describe(constraint),
                })

        return differences


def _describe(constraint: Optional[UniqueConstraint]) -> Optional[Dict]:
    if constraint is None:
        return None
    return {"name": constraint.name, "columns": list(constraint.columns)}


def diff_schemas(
    file_schema: TableSchema,
    table_schema: TableSchema,
    case_sensitive=True,
    registry: Optional[ComparatorRegistry] = None,
) -> SchemaDiffResult:
    return SchemaDiff(file_schema, table_schema, case_sensitive, registry).diff()
