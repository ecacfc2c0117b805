"""
Mapping between spans and InfluxDB points.

Identity (trace_id, span_id, parent_id) is stored as tags, which InfluxDB
indexes and groups by. Annotations are stored as fields, which it does not.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from .utils import now_ns, parse_timestamp
from ..errors import InvalidAnnotationError, MalformedResultError
from ..models import Annotation, Span, SpanID, format_id, parse_id

logger = logging.getLogger(__name__)

TIME_COLUMN = "time"
IDENTITY_TAGS = ("trace_id", "span_id", "parent_id")


@dataclass
class TaggedRecord:
    """One physical write of a span: indexed tags, annotation fields and a timestamp."""
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, str] = field(default_factory=dict)
    time: Optional[int] = None  # nanoseconds since the epoch

    def to_point(self) -> Dict[str, Any]:
        """Render the record in the shape ``InfluxDBClient.write_points`` expects."""
        point = {
            "measurement": self.measurement,
            "tags": dict(self.tags),
            "fields": dict(self.fields),
        }
        if self.time is not None:
            point["time"] = self.time
        return point


def encode(span_id: SpanID, annotations: Iterable[Annotation], time: Optional[int] = None,
           measurement: str = "spans") -> TaggedRecord:
    """
    Encode a span identity and its annotations as a tagged record.

    Args:
        span_id: Identity of the span
        annotations: Annotations to store as fields
        time: Timestamp in nanoseconds, the current time when omitted
        measurement: Measurement the record belongs to

    Returns:
        The record to write
    """
    tags = {
        "trace_id": format_id(span_id.trace),
        "span_id": format_id(span_id.span),
        "parent_id": format_id(span_id.parent),
    }
    fields = {annotation.key: _field_value(annotation) for annotation in annotations}
    return TaggedRecord(
        measurement=measurement,
        tags=tags,
        fields=fields,
        time=now_ns() if time is None else time,
    )


def decode(series: Mapping[str, Any]) -> Span:
    """
    Decode one row-group of a ``GROUP BY *`` query into a span.

    The last row of the group is authoritative; absent values are not
    annotations and the engine's time column is skipped.
    """
    span_id = span_id_from_tags(series.get("tags") or {})
    fields = fields_from_row(series.get("columns") or [], _last_row(series))
    annotations = [Annotation(key=key, value=value.encode("utf-8")) for key, value in fields.items()]
    return Span(id=span_id, annotations=annotations)


def decode_record(series: Mapping[str, Any], measurement: str = "spans") -> TaggedRecord:
    """Decode one row-group into the tagged record its last row describes."""
    tags = series.get("tags") or {}
    span_id = span_id_from_tags(tags)
    columns = series.get("columns") or []
    row = _last_row(series)
    timestamp = None
    if TIME_COLUMN in columns:
        raw_time = row[columns.index(TIME_COLUMN)]
        if raw_time is not None:
            timestamp = parse_timestamp(raw_time)
    return TaggedRecord(
        measurement=series.get("name") or measurement,
        tags={
            "trace_id": format_id(span_id.trace),
            "span_id": format_id(span_id.span),
            "parent_id": format_id(span_id.parent),
        },
        fields=fields_from_row(columns, row),
        time=timestamp,
    )


def span_id_from_tags(tags: Mapping[str, str]) -> SpanID:
    """Parse the identity tags of a row-group."""
    trace_id, span_id, parent_id = (parse_id(tags.get(tag)) for tag in IDENTITY_TAGS)
    return SpanID(trace=trace_id, span=span_id, parent=parent_id)


def fields_from_row(columns: List[str], row: List[Any]) -> Dict[str, str]:
    """
    Pair column names with row values, keeping only present string values.

    Raises:
        MalformedResultError: If the row does not match the columns or holds a
            value that is neither a string nor absent
    """
    if len(columns) != len(row):
        raise MalformedResultError(
            f"row has {len(row)} values for {len(columns)} columns"
        )
    fields = {}
    for key, value in zip(columns, row):
        if key == TIME_COLUMN:
            continue
        if value is None:
            continue
        if not isinstance(value, str):
            raise MalformedResultError(f"unexpected field type: {type(value).__name__} for '{key}'")
        fields[key] = value
    return fields


def without_empty_fields(fields: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Return the fields whose values are neither empty strings nor absent."""
    return {key: value for key, value in fields.items() if value is not None and value != ""}


def merge_fields(new: Mapping[str, str], old: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """
    Merge a stored field set into a newly collected one.

    The key set is the new one: keys only present in ``old`` are dropped and
    keys only present in ``new`` are kept. For keys present in both, a
    non-empty stored value replaces the new one.
    """
    merged = dict(new)
    for key, value in without_empty_fields(old).items():
        if key in merged:
            merged[key] = value
    return merged


def _field_value(annotation: Annotation) -> str:
    # String fields are UTF-8 text on the wire.
    try:
        return annotation.value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidAnnotationError(
            f"annotation '{annotation.key}' is not valid UTF-8: {e.reason} at byte {e.start}"
        ) from e


def _last_row(series: Mapping[str, Any]) -> List[Any]:
    values = series.get("values") or []
    if not values:
        raise MalformedResultError("unexpected empty series")
    if len(values) > 1:
        logger.debug(f"Series {series.get('tags')} holds {len(values)} writes, using the latest")
    return values[-1]
