"""Core data models for ragq."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Document:
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Qdrant payload layout for a stored document."""
        return {"content": self.content, "metadata": dict(self.metadata)}


@dataclass(frozen=True)
class RetrievedDocument:
    """A document read back from the vector store."""
    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    score: Optional[float] = None

    @classmethod
    def from_point(cls, point_id: Any, payload: Optional[Dict[str, Any]], score: Optional[float] = None) -> RetrievedDocument:
        payload = payload or {}
        return cls(
            id=str(point_id),
            content=payload.get("content") or "",
            metadata=payload.get("metadata") or {},
            score=float(score) if score is not None else None,
        )
