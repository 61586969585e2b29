"""
Capability queries over opaque document-model handles.

The authoring tool hands the encoder opaque objects (a filter, a sound cue, a
color gradient). A handle advertises zero or one view per ``Capability``;
every view exposes ``get_property(name, *args)`` which returns the value or
raises. One handle may advertise several capabilities at once.

Handles implement ``query_capability(capability) -> view | None``. The
``PropertyView`` and ``DocumentHandle`` classes below are a dictionary-backed
host used by event replay and tests.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import PropertyReadFault


class Capability(str, Enum):
    SOUND = "sound"
    DROP_SHADOW = "drop_shadow"
    BLUR = "blur"
    GLOW = "glow"
    BEVEL = "bevel"
    GRADIENT_GLOW = "gradient_glow"
    GRADIENT_BEVEL = "gradient_bevel"
    ADJUST_COLOR = "adjust_color"
    LINEAR_GRADIENT = "linear_gradient"


# Probe order for filter handles; encoded blocks follow this order.
FILTER_CAPABILITIES: Tuple[Capability, ...] = (
    Capability.DROP_SHADOW,
    Capability.BLUR,
    Capability.GLOW,
    Capability.BEVEL,
    Capability.GRADIENT_GLOW,
    Capability.GRADIENT_BEVEL,
    Capability.ADJUST_COLOR,
)


def query(handle: Any, capability: Capability) -> Optional[Any]:
    """Return the view ``handle`` exposes for ``capability``, or None."""
    if handle is None:
        return None
    lookup = getattr(handle, "query_capability", None)
    if lookup is None:
        return None
    return lookup(capability)


def probe(handle: Any, capabilities: Iterable[Capability] = FILTER_CAPABILITIES) -> List[Tuple[Capability, Any]]:
    """Every (capability, view) pair the handle satisfies, in probe order."""
    matches = []
    for capability in capabilities:
        view = query(handle, capability)
        if view is not None:
            matches.append((capability, view))
    return matches


def read(view: Any, capability: Capability, prop: str, *args: Any) -> Any:
    """Read one property from a view, converting any getter failure into PropertyReadFault."""
    try:
        return view.get_property(prop, *args)
    except PropertyReadFault:
        raise
    except Exception as e:
        raise PropertyReadFault(capability.value, prop, str(e)) from e


# ============================================================================
# IN-MEMORY HOST
# ============================================================================

class PropertyView:
    """Dictionary-backed capability view."""

    def __init__(self, capability: Capability, props: Optional[Mapping[str, Any]] = None):
        self.capability = capability
        self.props: Dict[str, Any] = dict(props or {})

    def get_property(self, name: str, *args: Any) -> Any:
        if name not in self.props:
            raise PropertyReadFault(self.capability.value, name, "property not available")
        value = self.props[name]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(*args)
        for index in args:
            try:
                value = value[index]
            except (IndexError, KeyError, TypeError) as e:
                raise PropertyReadFault(self.capability.value, name, f"no entry at {index!r}") from e
        return value

    def __repr__(self) -> str:
        return f"PropertyView({self.capability.value}, {sorted(self.props)})"


class DocumentHandle:
    """An opaque handle exposing a fixed set of capability views."""

    def __init__(self, views: Optional[Mapping[Capability, Any]] = None):
        self._views: Dict[Capability, Any] = {}
        for capability, view in (views or {}).items():
            capability = Capability(capability)
            if isinstance(view, Mapping):
                view = PropertyView(capability, view)
            self._views[capability] = view

    def query_capability(self, capability: Capability) -> Optional[Any]:
        return self._views.get(capability)

    @property
    def capabilities(self) -> List[Capability]:
        return list(self._views)

    def __repr__(self) -> str:
        return f"DocumentHandle({[c.value for c in self._views]})"


def make_handle(**views: Mapping[str, Any]) -> DocumentHandle:
    """Shorthand: ``make_handle(blur={...}, glow={...})``."""
    return DocumentHandle({Capability(name): props for name, props in views.items()})


def make_linear_gradient(stops: Iterable[Any], count: Optional[int] = None) -> DocumentHandle:
    """
    Build a linear-gradient handle from ``(position, color)`` pairs.

    ``count`` overrides the advertised key color count.
    """
    points = [tuple(stop) for stop in stops]
    return DocumentHandle(
        {
            Capability.LINEAR_GRADIENT: {
                "key_color_count": len(points) if count is None else count,
                "key_color": points,
            }
        }
    )
