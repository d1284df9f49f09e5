from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ingest_schema.canonical.field import ColumnDefinition
from ingest_schema.utils.exceptions import SchemaValidationError


def normalize_name(name: str, case_sensitive: bool = True) -> str:
    return name if case_sensitive else name.lower()


@dataclass
class UniqueConstraint:
    """
    Named, ordered list of column references.
    """
    name: str
    columns: List[str]


@dataclass
class TableSchema:
    """
    Canonical representation of a table.
    Works for both sides of a load:
    - file schema inferred from sampled values
    - destination schema introspected from the database
    """
    name: str
    columns: List[ColumnDefinition]

    primary_key: Optional[UniqueConstraint] = None
    unique_constraints: List[UniqueConstraint] = field(default_factory=list)

    # Optional runtime metadata
    # e.g. source_file, sampled_rows
    metadata: Dict = field(default_factory=dict)

    def column_index(self, case_sensitive: bool = True) -> Dict[str, ColumnDefinition]:
        return {
            normalize_name(c.name, case_sensitive): c
            for c in self.columns
        }

    def all_constraints(self) -> List[UniqueConstraint]:
        if self.primary_key is None:
            return list(self.unique_constraints)
        return [self.primary_key] + list(self.unique_constraints)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_duplicates(self, case_sensitive: bool = True):
        seen = {}
        duplicates = set()

        for column in self.columns:
            key = normalize_name(column.name, case_sensitive)

            if key in seen:
                duplicates.add(seen[key])
                duplicates.add(column.name)
            else:
                seen[key] = column.name

        if duplicates:
            raise SchemaValidationError(
                f"Duplicate column names in table '{self.name}': "
                f"{sorted(duplicates)}"
            )

    def validate_constraints(self, case_sensitive: bool = True):
        known = {normalize_name(c.name, case_sensitive) for c in self.columns}

        for constraint in self.all_constraints():
            if not constraint.columns:
                raise SchemaValidationError(
                    f"Constraint '{constraint.name}' of table '{self.name}' "
                    f"has no columns"
                )
            missing = [
                c for c in constraint.columns
                if normalize_name(c, case_sensitive) not in known
            ]
            if missing:
                raise SchemaValidationError(
                    f"Constraint '{constraint.name}' of table '{self.name}' "
                    f"references unknown columns: {missing}"
                )

    def validate(self, case_sensitive: bool = True) -> bool:
        self.validate_duplicates(case_sensitive)
        self.validate_constraints(case_sensitive)
        return True
