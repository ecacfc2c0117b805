"""
Trace model for representing a root span and its child spans.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .span import Span, SpanID


class Trace(BaseModel):
    """
    A span together with its sub-traces.

    The model nests recursively, but traces read back from the store only ever
    carry one level: the root span and its descendants as direct children.
    """
    span: Span = Field(..., description="The span at this level of the trace")
    sub: List["Trace"] = Field(default_factory=list, description="Child traces")

    @property
    def span_count(self) -> int:
        return 1 + sum(child.span_count for child in self.sub)

    def find_span(self, span_id: SpanID) -> Optional[Span]:
        """Return the span with the given identity, searching depth first."""
        if self.span.id == span_id:
            return self.span
        for child in self.sub:
            found = child.find_span(span_id)
            if found is not None:
                return found
        return None
