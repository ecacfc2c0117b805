"""
Core data models for spans, traces and their identifiers.
"""

from .identifiers import ROOT_ID, format_id, parse_id, generate_id
from .span import SpanID, Annotation, Span
from .trace import Trace

__all__ = [
    "ROOT_ID",
    "format_id",
    "parse_id",
    "generate_id",
    "SpanID",
    "Annotation",
    "Span",
    "Trace",
]
