import logging
from typing import Optional, Set

from ingest_schema.canonical import types as T
from ingest_schema.canonical.field import ColumnDefinition
from ingest_schema.inference.numeric_inference import detect_precision
from ingest_schema.inference.type_probe import (
    DEFAULT_BOOLEAN_LEXICON,
    BooleanLexicon,
    is_ascii_text,
    probe_types,
)
from ingest_schema.observability.logger import log_event


def combine_candidate_types(a: Set[str], b: Set[str]) -> Set[str]:
    """
    Narrow two candidate sets to the types both agree on.

    An empty side means "no observation yet" and yields the other side.
    Irreconcilable sets fall back to opaque large text instead of failing,
    so a mixed column never stops an ingestion.
    """
    if not a:
        return set(b)
    if not b:
        return set(a)

    common = a & b
    if common:
        return common

    log_event(
        "TYPE_FALLBACK_APPLIED",
        {"left": sorted(a), "right": sorted(b), "fallback": T.FAIL_OPEN_TYPE},
        level=logging.DEBUG,
    )
    return {T.FAIL_OPEN_TYPE}


def probe_and_accumulate(
    column: ColumnDefinition,
    raw: Optional[str],
    boolean_lexicon: BooleanLexicon = DEFAULT_BOOLEAN_LEXICON,
) -> ColumnDefinition:
    """
    Fold one cell into the running summary of its column.
    Called once per cell by the reader; never raises.
    """
    modifier = column.type_modifier

    cell = None if raw is None else str(raw).strip()
    if not cell:
        modifier.observe(null=True)
        return column

    column.possible_types = combine_candidate_types(
        column.possible_types,
        probe_types(cell, boolean_lexicon),
    )

    precision, scale = detect_precision(cell)
    modifier.observe(
        length=len(cell),
        precision=precision,
        scale=scale,
        non_ascii=not is_ascii_text(cell),
    )
    return column


def merge_column_states(a: ColumnDefinition, b: ColumnDefinition) -> ColumnDefinition:
    """
    Combine partial summaries of the same column scanned in separate
    shards. Order of merging does not change the result.
    """
    if a.name != b.name:
        raise ValueError(
            f"Cannot merge summaries of different columns: '{a.name}' and '{b.name}'"
        )

    return ColumnDefinition(
        name=a.name,
        possible_types=combine_candidate_types(a.possible_types, b.possible_types),
        type_modifier=a.type_modifier.merge(b.type_modifier),
    )
