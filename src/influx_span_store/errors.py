"""
Exceptions raised by the span store.

Transport failures from the InfluxDB client are never wrapped; they reach the
caller as ``InfluxDBClientError``, ``InfluxDBServerError`` or ``requests``
exceptions.
"""


class TraceStoreError(Exception):
    """Base class for errors detected by the span store itself."""


class InvalidIdentifierError(TraceStoreError, ValueError):
    """An identifier is outside the canonical hexadecimal alphabet."""


class InvalidAnnotationError(TraceStoreError, ValueError):
    """An annotation value cannot be stored as an InfluxDB string field."""


class MalformedResultError(TraceStoreError):
    """The engine answered with a result the store cannot interpret."""


class IntegrityError(TraceStoreError):
    """Stored spans are structurally inconsistent."""


class TraceNotFoundError(TraceStoreError, LookupError):
    """No span is stored under the requested trace identifier."""

    def __init__(self, trace_id: str):
        super().__init__(f"trace not found: {trace_id}")
        self.trace_id = trace_id
