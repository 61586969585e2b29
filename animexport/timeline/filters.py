"""
Filter encoding: canonical FilterSpec records from opaque filter handles.

A handle is probed against every known filter capability independently and
one FilterSpec is produced per capability it satisfies, in probe order.
"""

from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from animexport.config.schemas import EncoderConfig
from animexport.utils.logs import get_logger

from .capabilities import FILTER_CAPABILITIES, Capability, probe, query, read
from .errors import UNSUPPORTED_ENUM, Diagnostic, PropertyReadFault
from .sdk import (
    GRADIENT_POSITION_MAX,
    coerce_color,
    filter_placement_name,
    filter_quality_name,
    format_color,
    format_strength,
)

log = get_logger("animexport.filters")

Reporter = Callable[[Diagnostic], None]


# ============================================================================
# PYDANTIC MODELS
# ============================================================================

class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class GradientStop(_Record):
    """One key color of a gradient filter, in source order."""

    offset: float = Field(..., ge=0.0, le=100.0, description="Percent along the gradient")
    stop_color: str = Field(..., alias="stopColor")
    stop_opacity: float = Field(..., ge=0.0, le=1.0, alias="stopOpacity")


class DropShadowFilter(_Record):
    filter_type: Literal["DropShadowFilter"] = Field("DropShadowFilter", alias="filterType")
    enabled: bool = True
    angle: float = 0.0
    blur_x: float = Field(0.0, alias="blurX")
    blur_y: float = Field(0.0, alias="blurY")
    distance: float = 0.0
    hide_object: bool = Field(False, alias="hideObject")
    inner_shadow: bool = Field(False, alias="innerShadow")
    knockout: bool = Field(False, alias="knockOut")
    quality: Optional[str] = Field(None, alias="qualityType")
    strength: str = "1"
    shadow_color: str = Field("#000000", alias="shadowColor")


class BlurFilter(_Record):
    filter_type: Literal["BlurFilter"] = Field("BlurFilter", alias="filterType")
    enabled: bool = True
    blur_x: float = Field(0.0, alias="blurX")
    blur_y: float = Field(0.0, alias="blurY")
    quality: Optional[str] = Field(None, alias="qualityType")


class GlowFilter(_Record):
    filter_type: Literal["GlowFilter"] = Field("GlowFilter", alias="filterType")
    enabled: bool = True
    blur_x: float = Field(0.0, alias="blurX")
    blur_y: float = Field(0.0, alias="blurY")
    inner_shadow: bool = Field(False, alias="innerShadow")
    knockout: bool = Field(False, alias="knockOut")
    quality: Optional[str] = Field(None, alias="qualityType")
    strength: str = "1"
    shadow_color: str = Field("#000000", alias="shadowColor")


class BevelFilter(_Record):
    filter_type: Literal["BevelFilter"] = Field("BevelFilter", alias="filterType")
    enabled: bool = True
    angle: float = 0.0
    blur_x: float = Field(0.0, alias="blurX")
    blur_y: float = Field(0.0, alias="blurY")
    distance: float = 0.0
    highlight_color: str = Field("#ffffff", alias="highlightColor")
    knockout: bool = Field(False, alias="knockOut")
    quality: Optional[str] = Field(None, alias="qualityType")
    strength: str = "1"
    shadow_color: str = Field("#000000", alias="shadowColor")
    placement: Optional[str] = None


class GradientGlowFilter(_Record):
    filter_type: Literal["GradientGlowFilter"] = Field("GradientGlowFilter", alias="filterType")
    enabled: bool = True
    angle: float = 0.0
    blur_x: float = Field(0.0, alias="blurX")
    blur_y: float = Field(0.0, alias="blurY")
    distance: float = 0.0
    knockout: bool = Field(False, alias="knockOut")
    quality: Optional[str] = Field(None, alias="qualityType")
    strength: str = "1"
    placement: Optional[str] = None
    gradient_stops: Optional[Tuple[GradientStop, ...]] = Field(None, alias="GradientStops")


class GradientBevelFilter(_Record):
    filter_type: Literal["GradientBevelFilter"] = Field("GradientBevelFilter", alias="filterType")
    enabled: bool = True
    angle: float = 0.0
    blur_x: float = Field(0.0, alias="blurX")
    blur_y: float = Field(0.0, alias="blurY")
    distance: float = 0.0
    knockout: bool = Field(False, alias="knockOut")
    quality: Optional[str] = Field(None, alias="qualityType")
    strength: str = "1"
    placement: Optional[str] = None
    gradient_stops: Optional[Tuple[GradientStop, ...]] = Field(None, alias="GradientStops")


class AdjustColorFilter(_Record):
    filter_type: Literal["AdjustColorFilter"] = Field("AdjustColorFilter", alias="filterType")
    enabled: bool = True
    brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    hue: float = 0.0


FilterSpec = Union[
    DropShadowFilter,
    BlurFilter,
    GlowFilter,
    BevelFilter,
    GradientGlowFilter,
    GradientBevelFilter,
    AdjustColorFilter,
]


# ============================================================================
# ENCODER
# ============================================================================

def _log_diagnostic(diagnostic: Diagnostic) -> None:
    log.debug("%s", diagnostic)


class FilterEncoder:
    """Probe filter handles and read each matching variant into a FilterSpec."""

    def __init__(self, config: Optional[EncoderConfig] = None, report: Optional[Reporter] = None):
        self.config = config or EncoderConfig()
        self.report = report or _log_diagnostic
        self._variants: Dict[Capability, Callable[[Any], FilterSpec]] = {
            Capability.DROP_SHADOW: self._drop_shadow,
            Capability.BLUR: self._blur,
            Capability.GLOW: self._glow,
            Capability.BEVEL: self._bevel,
            Capability.GRADIENT_GLOW: self._gradient_glow,
            Capability.GRADIENT_BEVEL: self._gradient_bevel,
            Capability.ADJUST_COLOR: self._adjust_color,
        }

    def encode(self, handle: Any) -> List[FilterSpec]:
        specs = []
        for capability, view in probe(handle, FILTER_CAPABILITIES):
            specs.append(self._variants[capability](view))
        if len(specs) > 1:
            log.debug("Filter handle matched %d variants: %s", len(specs), [s.filter_type for s in specs])
        return specs

    # ------------------------------------------------------------------
    # property readers
    # ------------------------------------------------------------------

    def _number(self, view: Any, capability: Capability, prop: str) -> float:
        value = read(view, capability, prop)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise PropertyReadFault(capability.value, prop, f"not a number: {value!r}") from e

    def _flag(self, view: Any, capability: Capability, prop: str) -> bool:
        return bool(read(view, capability, prop))

    def _color(self, view: Any, capability: Capability, prop: str) -> str:
        value = read(view, capability, prop)
        try:
            return format_color(value, self.config.color_format)
        except (TypeError, ValueError) as e:
            raise PropertyReadFault(capability.value, prop, str(e)) from e

    def _strength(self, view: Any, capability: Capability) -> str:
        value = read(view, capability, "strength")
        try:
            return format_strength(value)
        except (TypeError, ValueError) as e:
            raise PropertyReadFault(capability.value, "strength", str(e)) from e

    def _quality(self, view: Any, capability: Capability) -> Optional[str]:
        code = read(view, capability, "quality")
        name = filter_quality_name(code)
        if name is None:
            self.report(
                Diagnostic(UNSUPPORTED_ENUM, f"Unknown filter quality {code!r}; qualityType omitted",
                           {"capability": capability.value, "code": code})
            )
        return name

    def _placement(self, view: Any, capability: Capability) -> Optional[str]:
        code = read(view, capability, "placement")
        name = filter_placement_name(code)
        if name is None:
            self.report(
                Diagnostic(UNSUPPORTED_ENUM, f"Unknown filter placement {code!r}; placement omitted",
                           {"capability": capability.value, "code": code})
            )
        return name

    # ------------------------------------------------------------------
    # variants
    # ------------------------------------------------------------------

    def _drop_shadow(self, view: Any) -> DropShadowFilter:
        cap = Capability.DROP_SHADOW
        return DropShadowFilter(
            enabled=self._flag(view, cap, "enabled"),
            angle=self._number(view, cap, "angle"),
            blur_x=self._number(view, cap, "blur_x"),
            blur_y=self._number(view, cap, "blur_y"),
            distance=self._number(view, cap, "distance"),
            hide_object=self._flag(view, cap, "hide_object"),
            inner_shadow=self._flag(view, cap, "inner_shadow"),
            knockout=self._flag(view, cap, "knockout"),
            quality=self._quality(view, cap),
            strength=self._strength(view, cap),
            shadow_color=self._color(view, cap, "shadow_color"),
        )

    def _blur(self, view: Any) -> BlurFilter:
        cap = Capability.BLUR
        return BlurFilter(
            enabled=self._flag(view, cap, "enabled"),
            blur_x=self._number(view, cap, "blur_x"),
            blur_y=self._number(view, cap, "blur_y"),
            quality=self._quality(view, cap),
        )

    def _glow(self, view: Any) -> GlowFilter:
        cap = Capability.GLOW
        return GlowFilter(
            enabled=self._flag(view, cap, "enabled"),
            blur_x=self._number(view, cap, "blur_x"),
            blur_y=self._number(view, cap, "blur_y"),
            inner_shadow=self._flag(view, cap, "inner_shadow"),
            knockout=self._flag(view, cap, "knockout"),
            quality=self._quality(view, cap),
            strength=self._strength(view, cap),
            shadow_color=self._color(view, cap, "shadow_color"),
        )

    def _bevel(self, view: Any) -> BevelFilter:
        cap = Capability.BEVEL
        return BevelFilter(
            enabled=self._flag(view, cap, "enabled"),
            angle=self._number(view, cap, "angle"),
            blur_x=self._number(view, cap, "blur_x"),
            blur_y=self._number(view, cap, "blur_y"),
            distance=self._number(view, cap, "distance"),
            highlight_color=self._color(view, cap, "highlight_color"),
            knockout=self._flag(view, cap, "knockout"),
            quality=self._quality(view, cap),
            strength=self._strength(view, cap),
            shadow_color=self._color(view, cap, "shadow_color"),
            placement=self._placement(view, cap),
        )

    def _gradient_fields(self, view: Any, cap: Capability) -> Dict[str, Any]:
        return dict(
            enabled=self._flag(view, cap, "enabled"),
            angle=self._number(view, cap, "angle"),
            blur_x=self._number(view, cap, "blur_x"),
            blur_y=self._number(view, cap, "blur_y"),
            distance=self._number(view, cap, "distance"),
            knockout=self._flag(view, cap, "knockout"),
            quality=self._quality(view, cap),
            strength=self._strength(view, cap),
            placement=self._placement(view, cap),
            gradient_stops=self.encode_gradient_stops(read(view, cap, "gradient")),
        )

    def _gradient_glow(self, view: Any) -> GradientGlowFilter:
        return GradientGlowFilter(**self._gradient_fields(view, Capability.GRADIENT_GLOW))

    def _gradient_bevel(self, view: Any) -> GradientBevelFilter:
        return GradientBevelFilter(**self._gradient_fields(view, Capability.GRADIENT_BEVEL))

    def _adjust_color(self, view: Any) -> AdjustColorFilter:
        cap = Capability.ADJUST_COLOR
        return AdjustColorFilter(
            enabled=self._flag(view, cap, "enabled"),
            brightness=self._number(view, cap, "brightness"),
            contrast=self._number(view, cap, "contrast"),
            saturation=self._number(view, cap, "saturation"),
            hue=self._number(view, cap, "hue"),
        )

    # ------------------------------------------------------------------
    # gradients
    # ------------------------------------------------------------------

    def encode_gradient_stops(self, gradient: Any) -> Optional[Tuple[GradientStop, ...]]:
        """
        Read every key color of a linear gradient by index.

        Returns None when the gradient is not linear, so the stops field is
        left out; a linear gradient with no key colors yields an empty tuple.
        """
        cap = Capability.LINEAR_GRADIENT
        view = query(gradient, cap)
        if view is None:
            return None
        raw_count = read(view, cap, "key_color_count")
        try:
            count = int(raw_count)
        except (TypeError, ValueError) as e:
            raise PropertyReadFault(cap.value, "key_color_count", f"not an integer: {raw_count!r}") from e
        stops = []
        for index in range(count):
            position, color = self._color_point(read(view, cap, "key_color", index), index)
            stops.append(gradient_stop(position, color, self.config.color_format))
        return tuple(stops)

    def _color_point(self, point: Any, index: int) -> Tuple[Any, Any]:
        if isinstance(point, dict):
            if "pos" in point and "color" in point:
                return point["pos"], point["color"]
        elif isinstance(point, (list, tuple)) and len(point) == 2:
            return point[0], point[1]
        else:
            pos = getattr(point, "pos", None)
            color = getattr(point, "color", None)
            if pos is not None and color is not None:
                return pos, color
        raise PropertyReadFault(Capability.LINEAR_GRADIENT.value, "key_color", f"malformed color point at {index}")


def gradient_offset(position: Any) -> float:
    """Map a gradient position in [0, 255] onto a percentage in [0, 100]."""
    return float(position) * 100.0 / GRADIENT_POSITION_MAX


def gradient_stop(position: Any, color: Any, color_format: str = "#") -> GradientStop:
    try:
        c = coerce_color(color)
        pos = float(position)
    except (TypeError, ValueError) as e:
        raise PropertyReadFault(Capability.LINEAR_GRADIENT.value, "key_color", str(e)) from e
    if not 0 <= pos <= GRADIENT_POSITION_MAX:
        raise PropertyReadFault(
            Capability.LINEAR_GRADIENT.value, "key_color", f"position {position!r} outside 0-{GRADIENT_POSITION_MAX}"
        )
    return GradientStop(
        offset=gradient_offset(pos),
        stop_color=format_color(c, color_format),
        stop_opacity=c.opacity,
    )


def encode_filters(handle: Any, config: Optional[EncoderConfig] = None) -> List[FilterSpec]:
    """One FilterSpec per filter capability the handle satisfies."""
    return FilterEncoder(config).encode(handle)
