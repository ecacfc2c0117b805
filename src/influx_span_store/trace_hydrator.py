"""
Caller-facing access to stored traces and spans.
"""

from typing import List, Optional
import logging

from .errors import TraceNotFoundError
from .models import Span, SpanID, Trace
from .sources.interfaces import SpanStore, TraceQueryer

logger = logging.getLogger(__name__)


class TraceHydrator:
    """
    Reads traces and spans from a span store.

    A missing trace is reported as ``None``; integrity and engine errors
    propagate to the caller.
    """

    def __init__(self, store: SpanStore):
        """
        Initialize the TraceHydrator.

        Args:
            store: Span store to read from
        """
        self.store = store
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_trace(self, trace_id: int) -> Optional[Trace]:
        """
        Get a trace by its identifier.

        Args:
            trace_id: The trace identifier

        Returns:
            The trace or None if not found
        """
        try:
            trace = self.store.trace(trace_id)
        except TraceNotFoundError as e:
            self.logger.warning(f"Trace '{e.trace_id}' not found")
            return None

        self.logger.debug(f"Retrieved trace with {trace.span_count} spans")
        return trace

    def get_traces(self) -> List[Trace]:
        """Get one page of traces, or an empty list if the store cannot list traces."""
        if not isinstance(self.store, TraceQueryer):
            self.logger.warning(f"{type(self.store).__name__} does not support listing traces")
            return []
        traces = self.store.traces()
        self.logger.debug(f"Retrieved {len(traces)} traces")
        return traces

    def get_span(self, span_id: SpanID) -> Optional[Span]:
        """
        Get a single span by its identity.

        Args:
            span_id: Identity of the span

        Returns:
            The span or None if it is not stored
        """
        trace = self.get_trace(span_id.trace)
        if trace is None:
            return None
        span = trace.find_span(span_id)
        if span is None:
            self.logger.warning(f"Span '{span_id}' not found in its trace")
        return span

    def get_child_spans(self, trace_id: int) -> List[Span]:
        """
        Get all non-root spans of a trace.

        Args:
            trace_id: The trace identifier

        Returns:
            List of child spans, empty if the trace is not found
        """
        trace = self.get_trace(trace_id)
        if trace is None:
            return []
        return [child.span for child in trace.sub]
