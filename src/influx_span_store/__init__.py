"""
InfluxDB Span Store - persists distributed-tracing spans in InfluxDB.

This package provides tools and utilities for:
- Collecting span annotations into tagged InfluxDB points
- Reconstructing a trace (root span plus child spans) from grouped points
- Listing a page of traces with all of their child spans
- Detecting structural problems such as duplicate roots and orphaned spans
"""

__version__ = "0.1.0"

from .errors import (
    TraceStoreError,
    InvalidIdentifierError,
    InvalidAnnotationError,
    MalformedResultError,
    IntegrityError,
    TraceNotFoundError,
)
from .models import (
    ROOT_ID,
    SpanID,
    Annotation,
    Span,
    Trace,
    format_id,
    parse_id,
    generate_id,
)
from .trace_hydrator import TraceHydrator
from .sources.interfaces import SpanStore, TraceQueryer
from .sources.influxdb_store import InfluxDBStore, InfluxDBStoreConfig

__all__ = [
    "SpanID",
    "Annotation",
    "Span",
    "Trace",
    "ROOT_ID",
    "format_id",
    "parse_id",
    "generate_id",
    "TraceHydrator",
    "SpanStore",
    "TraceQueryer",
    "InfluxDBStore",
    "InfluxDBStoreConfig",
    # Errors
    "TraceStoreError",
    "InvalidIdentifierError",
    "InvalidAnnotationError",
    "MalformedResultError",
    "IntegrityError",
    "TraceNotFoundError",
]
