"""
Interfaces for span stores.
"""

from abc import ABC, abstractmethod
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import Annotation, SpanID, Trace


class SpanStore(ABC):
    """Abstract interface for stores that collect spans and return traces."""

    @abstractmethod
    def collect(self, span_id: "SpanID", *annotations: "Annotation") -> None:
        """
        Merge annotations into the stored span with the given identity.

        Args:
            span_id: Identity of the span
            annotations: Annotations collected for the span
        """
        pass

    @abstractmethod
    def trace(self, trace_id: int) -> "Trace":
        """
        Reconstruct the trace with the given identifier.

        Args:
            trace_id: The trace identifier

        Returns:
            The root span with its child spans

        Raises:
            TraceNotFoundError: If no span is stored for the trace
        """
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """
        Test the connection to the underlying engine.

        Returns:
            True if connection successful, False otherwise
        """
        pass


class TraceQueryer(ABC):
    """Abstract interface for stores that can list traces."""

    @abstractmethod
    def traces(self) -> List["Trace"]:
        """
        Return one page of traces, each with all of its child spans.
        """
        pass
