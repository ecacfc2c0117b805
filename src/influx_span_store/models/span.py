"""
Span model for representing individual spans in distributed traces.
"""

from typing import Dict, List

from pydantic import BaseModel, Field

from .identifiers import MAX_ID, ROOT_ID, format_id, generate_id, parse_id
from ..errors import InvalidIdentifierError


class SpanID(BaseModel):
    """Identity of a span and its lineage within a trace."""
    trace: int = Field(..., ge=0, le=MAX_ID, description="Identifier of the trace the span belongs to")
    span: int = Field(..., ge=0, le=MAX_ID, description="Identifier of the span itself")
    parent: int = Field(ROOT_ID, ge=0, le=MAX_ID, description="Identifier of the parent span, ROOT_ID for roots")

    class Config:
        """Pydantic configuration."""
        frozen = True

    @property
    def is_root(self) -> bool:
        return self.parent == ROOT_ID

    @classmethod
    def new_root(cls) -> "SpanID":
        """Create the identity of a new root span in a new trace."""
        return cls(trace=generate_id(), span=generate_id())

    @classmethod
    def new_child(cls, parent: "SpanID") -> "SpanID":
        """Create the identity of a new span whose parent is the given span."""
        return cls(trace=parent.trace, span=generate_id(), parent=parent.span)

    @classmethod
    def parse(cls, text: str) -> "SpanID":
        """
        Parse the ``trace/span`` or ``trace/span/parent`` string form.

        Raises:
            InvalidIdentifierError: If the text is not a span ID
        """
        parts = text.split("/")
        if len(parts) not in (2, 3):
            raise InvalidIdentifierError(f"invalid span ID: {text!r}")
        ids = [parse_id(part) for part in parts]
        return cls(trace=ids[0], span=ids[1], parent=ids[2] if len(ids) == 3 else ROOT_ID)

    def __str__(self) -> str:
        text = f"{format_id(self.trace)}/{format_id(self.span)}"
        if not self.is_root:
            text += f"/{format_id(self.parent)}"
        return text


class Annotation(BaseModel):
    """A key and opaque value attached to a span."""
    key: str = Field(..., description="Annotation key")
    value: bytes = Field(b"", description="Opaque annotation value")


class Span(BaseModel):
    """Represents a single span in a distributed trace."""
    id: SpanID = Field(..., description="Identity of the span")
    annotations: List[Annotation] = Field(default_factory=list, description="Annotations attached to the span")

    def annotation_map(self) -> Dict[str, bytes]:
        """Return the annotations as a key to value mapping."""
        return {annotation.key: annotation.value for annotation in self.annotations}
