"""
Error taxonomy for timeline encoding.

Faults abort the command being encoded; diagnostics are non-fatal notes that
are logged and collected for the caller but never change the document.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class EncodingFault(Exception):
    """Encoding of the current command could not complete."""


class PropertyReadFault(EncodingFault):
    """A capability getter failed or did not provide the property."""

    def __init__(self, capability: str, prop: str, detail: Optional[str] = None):
        self.capability = capability
        self.prop = prop
        self.detail = detail
        msg = f"Failed to read '{prop}' from {capability} capability"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DocumentError(ValueError):
    """A serialized timeline document is malformed."""


# Diagnostic codes
UNSUPPORTED_ENUM = "unsupported_enum"
USAGE = "usage"


@dataclass
class Diagnostic:
    code: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"
