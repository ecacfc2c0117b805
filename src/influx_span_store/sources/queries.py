"""
InfluxQL query construction for the span store.

Identifier values never appear in the query text. They are validated against the
canonical identifier alphabet and passed to the engine as bound parameters.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from ..models.identifiers import ROOT_ID, canonical_id


@dataclass(frozen=True)
class InfluxQuery:
    """An InfluxQL statement and the parameters bound to it."""
    text: str
    params: Dict[str, str] = field(default_factory=dict)


def quote_name(name: str) -> str:
    """Quote an InfluxQL identifier such as a measurement name."""
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def select_spans(measurement: str, trace_id=None, span_id=None, parent_id=None,
                 limit: Optional[int] = None) -> InfluxQuery:
    """
    Build an exact-match lookup grouped by every tag.

    ``GROUP BY *`` yields one row-group per distinct (trace_id, span_id,
    parent_id) tag set with one row per write. ``SLIMIT`` caps the number of
    row-groups, so a limit counts spans rather than writes.

    Args:
        measurement: Measurement holding the span points
        trace_id: Trace identifier to match
        span_id: Span identifier to match
        parent_id: Parent identifier to match
        limit: Maximum number of row-groups to return

    Returns:
        The query with its bound identifier parameters
    """
    params = {}
    for tag, value in (("trace_id", trace_id), ("span_id", span_id), ("parent_id", parent_id)):
        if value is not None:
            params[tag] = canonical_id(value)
    if not params:
        raise ValueError("at least one identifier predicate is required")

    where = " AND ".join(f"{tag}=${tag}" for tag in params)
    text = f"SELECT * FROM {quote_name(measurement)} WHERE {where} GROUP BY *"
    if limit is not None:
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        text += f" SLIMIT {int(limit)}"
    return InfluxQuery(text=text, params=params)


def select_children(measurement: str, trace_ids: Iterable) -> InfluxQuery:
    """
    Build a query for the non-root spans of several traces at once.

    InfluxQL has no list membership operator, so each trace contributes one
    ``(trace_id=... AND parent_id!=root)`` clause and the clauses are ORed.
    """
    params = {"root_id": canonical_id(ROOT_ID)}
    clauses = []
    for i, trace_id in enumerate(trace_ids):
        name = f"trace_id_{i}"
        params[name] = canonical_id(trace_id)
        clauses.append(f"(trace_id=${name} AND parent_id!=$root_id)")
    if not clauses:
        raise ValueError("at least one trace identifier is required")

    where = " OR ".join(clauses)
    return InfluxQuery(
        text=f"SELECT * FROM {quote_name(measurement)} WHERE {where} GROUP BY *",
        params=params,
    )
