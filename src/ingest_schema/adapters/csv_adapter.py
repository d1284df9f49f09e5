import os
import csv
from typing import Dict, List, Optional

from ingest_schema.canonical import types as T
from ingest_schema.canonical.field import ColumnDefinition
from ingest_schema.canonical.table import TableSchema
from ingest_schema.inference.type_combiner import probe_and_accumulate
from ingest_schema.inference.type_determiner import DeterminerRegistry
from ingest_schema.inference.type_probe import DEFAULT_BOOLEAN_LEXICON, BooleanLexicon
from ingest_schema.inference.typed_value import to_typed_value
from ingest_schema.observability.logger import log_event
from ingest_schema.utils.exceptions import TypedValueError

CANDIDATE_DELIMITERS = [",", ";", "\t", "|"]


# ------------------------------------------------------------------
# Delimiter detection
# ------------------------------------------------------------------
def detect_delimiter_from_lines(lines: List[str]) -> str:
    """
    Robust delimiter detection with safe fallback.
    """
    sample = "\n".join(lines[:20])
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        for delimiter in (";", ",", "\t", "|"):
            if delimiter in sample:
                return delimiter
        return ","


# ------------------------------------------------------------------
# CSV Adapter
# ------------------------------------------------------------------
class CSVAdapter:
    """
    CSV sampling adapter.
    Responsibilities:
    - Skip blank and comment lines
    - Detect delimiter (unless given)
    - Repair empty column names using entity_name + position
    - Feed every sampled cell to the type combiner
    - Resolve each column with its configured strategy, or check
      sampled cells against a pinned column type
    DOES NOT:
    - Return converted values
    - Write anything to a database
    """

    def __init__(
        self,
        file_path: str,
        entity_name: Optional[str] = None,
        sample_size: int = 100,
        determiners: Optional[DeterminerRegistry] = None,
        delimiter: Optional[str] = None,
        encoding: str = "utf-8-sig",
        boolean_lexicon: BooleanLexicon = DEFAULT_BOOLEAN_LEXICON,
        column_types: Optional[Dict[str, str]] = None,
    ):
        if sample_size <= 0:
            raise ValueError("sample_size must be a positive integer")

        self.file_path = file_path
        self.sample_size = sample_size
        self.determiners = determiners or DeterminerRegistry()
        self.delimiter = "\t" if delimiter == "\\t" else delimiter
        self.encoding = encoding
        self.boolean_lexicon = boolean_lexicon
        self.column_types = {
            column: T.normalize_type(type_name)
            for column, type_name in (column_types or {}).items()
        }

        if entity_name:
            self.entity_name = entity_name
        else:
            self.entity_name = os.path.splitext(
                os.path.basename(file_path)
            )[0]

    # --------------------------------------------------
    # Entrypoint
    # --------------------------------------------------
    def parse(self) -> TableSchema:
        lines = self._read_clean_lines(limit=self.sample_size + 1)
        if not lines:
            raise ValueError(f"CSV {self.file_path} contains no valid (non-comment) lines")

        delimiter = self.delimiter or detect_delimiter_from_lines(lines)
        reader = csv.reader(lines, delimiter=delimiter)

        raw_header = next(reader, None)
        if not raw_header or not any(h.strip() for h in raw_header):
            raise ValueError(f"CSV {self.file_path} has no header row")

        columns = [
            ColumnDefinition(name=h.strip() or f"{self.entity_name}_{idx}")
            for idx, h in enumerate(raw_header, start=1)
        ]

        sampled_rows = 0
        for line_no, row in enumerate(reader, start=2):
            if len(row) != len(columns):
                raise ValueError(
                    f"Format error in {self.file_path} line {line_no}: "
                    f"expected {len(columns)} values, got {len(row)}"
                )
            for column, cell in zip(columns, row):
                probe_and_accumulate(column, cell, self.boolean_lexicon)
                self._check_pinned(column, cell, line_no)
            sampled_rows += 1

        for column in columns:
            self._resolve(column)

        log_event("FILE_SCHEMA_INFERRED", {
            "source_file": self.file_path,
            "entity": self.entity_name,
            "sampled_rows": sampled_rows,
            "columns": {c.name: c.data_type for c in columns},
        })

        return TableSchema(
            name=self.entity_name,
            columns=columns,
            metadata={
                "source_file": self.file_path,
                "delimiter": delimiter,
                "sampled_rows": sampled_rows,
                "sample_size": self.sample_size,
            },
        )

    # --------------------------------------------------
    # Internal helpers
    # --------------------------------------------------
    def _check_pinned(self, column: ColumnDefinition, cell: str, line_no: int):
        """
        Every sampled cell of a pinned column must convert to its type.
        """
        pinned = self.column_types.get(column.name)
        if not pinned:
            return
        try:
            to_typed_value(cell, pinned, self.boolean_lexicon)
        except TypedValueError as e:
            raise TypedValueError(
                f"Column '{column.name}' is pinned to {pinned} but line {line_no} "
                f"of {self.file_path} does not fit: {e}"
            ) from e

    def _resolve(self, column: ColumnDefinition):
        pinned = self.column_types.get(column.name)
        if pinned:
            column.data_type = pinned
            return
        determiner = self.determiners.get_determiner(column.name)
        column.data_type = determiner.determine_type(column)

    def _read_clean_lines(self, limit: Optional[int] = None) -> List[str]:
        """
        Removes:
        - empty lines
        - comment lines starting with '#' or '--'

        If limit is provided, stops after collecting `limit` valid lines.
        """
        valid_lines: List[str] = []

        with open(self.file_path, encoding=self.encoding, errors="replace") as f:
            for line in f:
                if limit is not None and len(valid_lines) >= limit:
                    break

                if line.strip() and not line.lstrip().startswith(("#", "--")):
                    valid_lines.append(line)

        return valid_lines
