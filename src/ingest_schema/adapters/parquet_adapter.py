from typing import Dict, List, Optional, Set
import os

import pyarrow as pa
import pyarrow.parquet as pq

from ingest_schema.canonical import types as T
from ingest_schema.canonical.field import ColumnDefinition
from ingest_schema.canonical.table import TableSchema
from ingest_schema.inference.type_combiner import probe_and_accumulate
from ingest_schema.inference.type_determiner import DeterminerRegistry
from ingest_schema.inference.type_probe import DEFAULT_BOOLEAN_LEXICON, BooleanLexicon
from ingest_schema.inference.typed_value import to_typed_value
from ingest_schema.observability.logger import log_event
from ingest_schema.utils.exceptions import TypedValueError

_SIGNED_INTS = {
    8: T.INTEGER_TYPES,
    16: T.INTEGER_TYPES[1:],
    32: T.INTEGER_TYPES[2:],
    64: T.INTEGER_TYPES[3:],
}
_UNSIGNED_INTS = {
    8: T.INTEGER_TYPES[1:],
    16: T.INTEGER_TYPES[2:],
    32: T.INTEGER_TYPES[3:],
}


def map_arrow_type_to_candidates(field_type: pa.DataType) -> Set[str]:
    """
    Candidate canonical types able to hold every value of an Arrow type.
    String columns return an empty set: their values are probed instead.
    """
    if pa.types.is_boolean(field_type):
        return {T.BOOLEAN}

    if pa.types.is_signed_integer(field_type):
        return set(_SIGNED_INTS[field_type.bit_width])

    if pa.types.is_unsigned_integer(field_type):
        return set(_UNSIGNED_INTS.get(field_type.bit_width, (T.DECIMAL,)))

    if pa.types.is_float16(field_type) or pa.types.is_float32(field_type):
        return {T.FLOAT, T.DOUBLE}

    if pa.types.is_float64(field_type):
        return {T.DOUBLE}

    if pa.types.is_decimal(field_type):
        return {T.DECIMAL}

    if pa.types.is_string(field_type) or pa.types.is_large_string(field_type):
        return set()

    if pa.types.is_fixed_size_binary(field_type):
        return {T.BINARY, T.VARBINARY}

    if pa.types.is_binary(field_type) or pa.types.is_large_binary(field_type):
        return {T.VARBINARY}

    if pa.types.is_timestamp(field_type):
        if field_type.tz:
            return {T.TIMESTAMP_WITH_TIMEZONE}
        return {T.TIMESTAMP, T.TIMESTAMP_WITH_TIMEZONE}

    if pa.types.is_date(field_type):
        return {T.DATE}

    if pa.types.is_time(field_type):
        return {T.TIME}

    # Nested / exotic types travel as opaque text
    return {T.NCLOB}


def _is_text(field_type: pa.DataType) -> bool:
    return pa.types.is_string(field_type) or pa.types.is_large_string(field_type)


class ParquetAdapter:
    """
    Adapter to convert a Parquet file schema into a file-side TableSchema.

    Responsibilities:
    - Read the Arrow schema from Parquet metadata
    - Derive candidate types from physical types
    - Probe sampled values of string columns
    - Carry precision / scale of DECIMAL columns
    - Pin configured column types, checking sampled strings against them
    """

    def __init__(
        self,
        file_path: str,
        entity_name: Optional[str] = None,
        sample_size: int = 100,
        determiners: Optional[DeterminerRegistry] = None,
        boolean_lexicon: BooleanLexicon = DEFAULT_BOOLEAN_LEXICON,
        column_types: Optional[Dict[str, str]] = None,
    ):
        self.file_path = file_path
        self.sample_size = sample_size
        self.determiners = determiners or DeterminerRegistry()
        self.boolean_lexicon = boolean_lexicon
        self.column_types = {
            column: T.normalize_type(type_name)
            for column, type_name in (column_types or {}).items()
        }
        self.entity_name = entity_name or os.path.splitext(
            os.path.basename(file_path)
        )[0]

    def _parse_field(self, field: pa.Field) -> ColumnDefinition:
        column = ColumnDefinition(
            name=field.name,
            possible_types=map_arrow_type_to_candidates(field.type),
        )
        column.type_modifier.nullable = field.nullable

        if pa.types.is_decimal(field.type):
            column.type_modifier.observe(
                precision=field.type.precision - field.type.scale,
                scale=field.type.scale,
            )
        return column

    def _check_pinned(self, name: str, pinned: str, value):
        try:
            to_typed_value(value, pinned, self.boolean_lexicon)
        except TypedValueError as e:
            raise TypedValueError(
                f"Column '{name}' of {self.file_path} is pinned to {pinned}: {e}"
            ) from e

    def _sample_text_columns(self, parquet_file: pq.ParquetFile, columns: Dict[str, ColumnDefinition]):
        if not columns:
            return

        batches = parquet_file.iter_batches(
            batch_size=self.sample_size, columns=list(columns)
        )
        batch = next(batches, None)
        if batch is None:
            return

        for name, column in columns.items():
            pinned = self.column_types.get(name)
            for value in batch.column(name).to_pylist():
                probe_and_accumulate(column, value, self.boolean_lexicon)
                if pinned:
                    self._check_pinned(name, pinned, value)

    def parse(self) -> TableSchema:
        parquet_file = pq.ParquetFile(self.file_path)
        schema = parquet_file.schema_arrow

        columns: List[ColumnDefinition] = [self._parse_field(f) for f in schema]
        text_columns = {
            f.name: c for f, c in zip(schema, columns) if _is_text(f.type)
        }
        self._sample_text_columns(parquet_file, text_columns)

        for column in columns:
            pinned = self.column_types.get(column.name)
            if pinned:
                column.data_type = pinned
                continue
            determiner = self.determiners.get_determiner(column.name)
            column.data_type = determiner.determine_type(column)

        log_event("FILE_SCHEMA_INFERRED", {
            "source_file": self.file_path,
            "entity": self.entity_name,
            "row_count": parquet_file.metadata.num_rows,
            "columns": {c.name: c.data_type for c in columns},
        })

        return TableSchema(
            name=self.entity_name,
            columns=columns,
            metadata={
                "source_file": self.file_path,
                "row_count": parquet_file.metadata.num_rows,
            },
        )
