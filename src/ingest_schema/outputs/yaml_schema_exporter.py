import os
from typing import Dict, Optional

import yaml

from ingest_schema.canonical import types as T
from ingest_schema.canonical.field import ColumnDefinition, TypeModifier
from ingest_schema.canonical.table import TableSchema, UniqueConstraint
from ingest_schema.utils.exceptions import SchemaValidationError, UnsupportedTypeError


def _constraint_to_dict(constraint: Optional[UniqueConstraint]) -> Optional[Dict]:
    if constraint is None:
        return None
    return {"name": constraint.name, "columns": list(constraint.columns)}


def _column_to_dict(column: ColumnDefinition) -> Dict:
    modifier = column.type_modifier
    entry = {
        "name": column.name,
        "type": column.data_type,
        "nullable": modifier.nullable,
    }
    if column.possible_types:
        entry["possible_types"] = sorted(column.possible_types)
    if modifier.max_length:
        entry["max_length"] = modifier.max_length
    if modifier.precision or modifier.scale:
        entry["precision"] = modifier.precision
        entry["scale"] = modifier.scale
    if modifier.contains_non_ascii:
        entry["contains_non_ascii"] = True
    if column.native_type:
        entry["native_type"] = column.native_type
    if column.description:
        entry["description"] = column.description
    return entry


def table_schema_to_dict(schema: TableSchema) -> Dict:
    payload = {
        "name": schema.name,
        "columns": [_column_to_dict(c) for c in schema.columns],
    }
    if schema.primary_key is not None:
        payload["primary_key"] = _constraint_to_dict(schema.primary_key)
    if schema.unique_constraints:
        payload["unique_constraints"] = [
            _constraint_to_dict(c) for c in schema.unique_constraints
        ]
    return payload


class YAMLSchemaExporter:
    """
    Exports a TableSchema into YAML format.
    """

    def __init__(self, schema: TableSchema):
        self.schema = schema

    def export_to_string(self) -> str:
        """
        Export schema as YAML string
        """
        return yaml.safe_dump(
            table_schema_to_dict(self.schema),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )

    def export_to_file(self, file_path: str):
        """
        Export schema to YAML file
        """
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(self.export_to_string())


# --------------------------------------------------
# Loading
# --------------------------------------------------

def _constraint_from_dict(entry: Dict, table: str) -> UniqueConstraint:
    if not isinstance(entry, dict) or "columns" not in entry:
        raise SchemaValidationError(
            f"Constraint entries of table '{table}' need 'name' and 'columns'"
        )
    columns = entry["columns"]
    if isinstance(columns, str):
        columns = [columns]
    return UniqueConstraint(
        name=str(entry.get("name") or "_".join(columns)),
        columns=[str(c) for c in columns],
    )


def _column_from_dict(entry: Dict, table: str) -> ColumnDefinition:
    if not isinstance(entry, dict) or not entry.get("name") or not entry.get("type"):
        raise SchemaValidationError(
            f"Column entries of table '{table}' need 'name' and 'type': {entry}"
        )
    try:
        data_type = T.normalize_type(entry["type"])
        possible_types = T.normalize_types(entry.get("possible_types") or [])
    except UnsupportedTypeError as e:
        raise SchemaValidationError(
            f"Column '{entry['name']}' of table '{table}': {e}"
        ) from e

    return ColumnDefinition(
        name=str(entry["name"]),
        possible_types=possible_types,
        data_type=data_type,
        type_modifier=TypeModifier(
            max_length=int(entry.get("max_length") or 0),
            precision=int(entry.get("precision") or 0),
            scale=int(entry.get("scale") or 0),
            contains_non_ascii=bool(entry.get("contains_non_ascii", False)),
            nullable=bool(entry.get("nullable", True)),
        ),
        native_type=entry.get("native_type"),
        description=entry.get("description"),
    )


def table_schema_from_dict(payload: Dict) -> TableSchema:
    if not isinstance(payload, dict) or not payload.get("columns"):
        raise SchemaValidationError("Table schema needs a non-empty 'columns' list")

    name = str(payload.get("name") or "unknown_table")
    primary_key = payload.get("primary_key")

    return TableSchema(
        name=name,
        columns=[_column_from_dict(c, name) for c in payload["columns"]],
        primary_key=_constraint_from_dict(primary_key, name) if primary_key else None,
        unique_constraints=[
            _constraint_from_dict(c, name)
            for c in payload.get("unique_constraints") or []
        ],
    )


def load_table_schema(path: str) -> TableSchema:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Schema file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            payload = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SchemaValidationError(f"Invalid YAML in {path}: {e}") from e

    return table_schema_from_dict(payload)
