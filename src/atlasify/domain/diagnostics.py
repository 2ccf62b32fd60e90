"""Non-fatal conditions reported alongside geometric results.

Numeric and topological trouble in a single shape never aborts a conversion.
Operations return their best-effort value together with `Diagnostic` entries
which the processor logs and counts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DiagnosticCode(Enum):
    """Kinds of recoverable conditions."""

    DEGENERATE_RING = "degenerate_ring"
    DUPLICATE_RING = "duplicate_ring"
    PROJECTION_NON_CONVERGENCE = "projection_non_convergence"
    SINGULAR_JACOBIAN = "singular_jacobian"
    AMBIGUOUS_CONTAINMENT = "ambiguous_containment"
    SELF_INTERSECTING_RING = "self_intersecting_ring"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A recoverable condition and a short description of where it happened.

    Attributes:
        code: Kind of condition
        detail: Human-readable context
    """

    code: DiagnosticCode
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"code": self.code.value, "detail": self.detail}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Diagnostic":
        """Deserialize from dictionary."""
        return cls(code=DiagnosticCode(data["code"]), detail=data.get("detail", ""))
