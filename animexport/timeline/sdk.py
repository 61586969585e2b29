#!/usr/bin/env python3
"""
Core SDK for timeline encoding

This module provides the single source of truth for enumeration tables, value
types and color formatting. All timeline modules import from this file to
avoid drift between the encoder and the document reader.
"""

from enum import Enum, IntEnum
from typing import Any, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator


# ============================================================================
# CONSTANTS
# ============================================================================

STAGE_ASSET_ID = 0
BOTTOM_OF_DISPLAY_LIST = 0
GRADIENT_POSITION_MAX = 255
CHANNEL_MAX = 255
COLOR_MATRIX_SIZE = 20

# Index is the host code; "Substract" is the spelling the playback runtime expects.
BLEND_MODES: Tuple[str, ...] = (
    "Normal",
    "Layer",
    "Darken",
    "Multiply",
    "Lighten",
    "Screen",
    "Overlay",
    "Hardlight",
    "Add",
    "Substract",
    "Difference",
    "Invert",
    "Alpha",
    "Erase",
)

FILTER_QUALITIES: Tuple[str, ...] = ("low", "medium", "high")
FILTER_PLACEMENTS: Tuple[str, ...] = ("inner", "outer", "full")


class LabelType(IntEnum):
    NONE = 0
    NAME = 1
    COMMENT = 2
    ANCHOR = 3


class SoundSyncMode(IntEnum):
    EVENT = 0
    START = 1
    STOP = 2
    STREAM = 3


class TimelineKind(str, Enum):
    STAGE = "stage"
    GRAPHIC = "graphic"
    MOVIECLIP = "movieclip"


def lookup_code(table: Sequence[str], code: Any) -> Optional[str]:
    """Map a host enumeration code onto its wire name, or None when unknown."""
    if isinstance(code, bool):
        return None
    try:
        index = int(code)
    except (TypeError, ValueError):
        return None
    if index != code or not 0 <= index < len(table):
        return None
    return table[index]


def blend_mode_name(code: Any) -> Optional[str]:
    return lookup_code(BLEND_MODES, code)


def filter_quality_name(code: Any) -> Optional[str]:
    return lookup_code(FILTER_QUALITIES, code)


def filter_placement_name(code: Any) -> Optional[str]:
    return lookup_code(FILTER_PLACEMENTS, code)


def derive_timeline_kind(asset_id: int, instance_name: Optional[str]) -> TimelineKind:
    """Stage for the root asset, graphic without an instance name, movieclip otherwise."""
    if asset_id == STAGE_ASSET_ID:
        return TimelineKind.STAGE
    if instance_name is None:
        return TimelineKind.GRAPHIC
    return TimelineKind.MOVIECLIP


# ============================================================================
# VALUE TYPES
# ============================================================================

class _Value(BaseModel):
    model_config = ConfigDict(frozen=True)


class Matrix2D(_Value):
    """Affine display transform; serialized as ``[a, b, c, d, tx, ty]``."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def from_sequence(cls, data):
        if isinstance(data, (list, tuple)):
            if len(data) != 6:
                raise ValueError("A 2D matrix needs 6 components: a, b, c, d, tx, ty")
            return dict(zip(("a", "b", "c", "d", "tx", "ty"), data))
        return data

    @model_serializer
    def to_wire(self):
        return [self.a, self.b, self.c, self.d, self.tx, self.ty]


class Rect(_Value):
    """Axis-aligned bounds; serialized as ``[left, top, right, bottom]``."""

    left: float
    top: float
    right: float
    bottom: float

    @model_validator(mode="before")
    @classmethod
    def from_sequence(cls, data):
        if isinstance(data, (list, tuple)):
            if len(data) != 4:
                raise ValueError("A rect needs 4 components: left, top, right, bottom")
            return dict(zip(("left", "top", "right", "bottom"), data))
        return data

    @model_serializer
    def to_wire(self):
        return [self.left, self.top, self.right, self.bottom]


class ColorMatrix(_Value):
    """4x5 row-major color transform matrix."""

    values: Tuple[float, ...] = Field(
        default=(
            1.0, 0.0, 0.0, 0.0, 0.0,
            0.0, 1.0, 0.0, 0.0, 0.0,
            0.0, 0.0, 1.0, 0.0, 0.0,
            0.0, 0.0, 0.0, 1.0, 0.0,
        )
    )

    @model_validator(mode="before")
    @classmethod
    def from_sequence(cls, data):
        if isinstance(data, (list, tuple)):
            return {"values": tuple(data)}
        return data

    @field_validator("values")
    @classmethod
    def validate_size(cls, v):
        if len(v) != COLOR_MATRIX_SIZE:
            raise ValueError(f"A color matrix needs {COLOR_MATRIX_SIZE} values, got {len(v)}")
        return v

    @model_serializer
    def to_wire(self):
        return list(self.values)


class Color(_Value):
    """8-bit RGBA color."""

    red: int = Field(0, ge=0, le=CHANNEL_MAX)
    green: int = Field(0, ge=0, le=CHANNEL_MAX)
    blue: int = Field(0, ge=0, le=CHANNEL_MAX)
    alpha: int = Field(CHANNEL_MAX, ge=0, le=CHANNEL_MAX)

    @property
    def opacity(self) -> float:
        return self.alpha / float(CHANNEL_MAX)


def coerce_color(value: Any) -> Color:
    """
    Accept the color shapes hosts hand over and produce a Color.
    Supported:
      - Color
      - (r, g, b) or (r, g, b, a)
      - {'red': .., 'green': .., 'blue': .., 'alpha': ..}
      - 0xRRGGBB integers (opaque)
      - '#rrggbb', '#rrggbbaa', '0xrrggbb' strings
    """
    if isinstance(value, Color):
        return value
    if isinstance(value, Mapping):
        return Color(**value)
    if isinstance(value, (list, tuple)):
        if len(value) not in (3, 4):
            raise ValueError(f"Color tuples need 3 or 4 channels, got {len(value)}")
        return Color(**dict(zip(("red", "green", "blue", "alpha"), value)))
    if isinstance(value, bool):
        raise ValueError("Boolean is not a color")
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"Color integer out of range: {value}")
        return Color(red=(value >> 16) & 0xFF, green=(value >> 8) & 0xFF, blue=value & 0xFF)
    if isinstance(value, str):
        digits = value.strip()
        if digits.startswith("#"):
            digits = digits[1:]
        elif digits.lower().startswith("0x"):
            digits = digits[2:]
        if len(digits) not in (6, 8):
            raise ValueError(f"Unrecognized color string: {value!r}")
        channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        return Color(**dict(zip(("red", "green", "blue", "alpha"), channels)))
    raise ValueError(f"Unsupported color value: {value!r}")


def format_color(color: Any, color_format: str = "#") -> str:
    """Render a color as ``#rrggbb`` (or ``0xrrggbb``); alpha is carried separately."""
    c = coerce_color(color)
    return f"{color_format}{c.red:02x}{c.green:02x}{c.blue:02x}"


def format_strength(value: Any) -> str:
    """Strength is a signed 32-bit integer on the host; the document carries its decimal text."""
    if isinstance(value, bool):
        raise ValueError("Boolean is not a strength")
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"Strength must be integral, got {value!r}")
    return str(int(number))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    # Constants
    'STAGE_ASSET_ID', 'BOTTOM_OF_DISPLAY_LIST', 'GRADIENT_POSITION_MAX', 'CHANNEL_MAX',
    'COLOR_MATRIX_SIZE', 'BLEND_MODES', 'FILTER_QUALITIES', 'FILTER_PLACEMENTS',

    # Enums
    'LabelType', 'SoundSyncMode', 'TimelineKind',

    # Value types
    'Matrix2D', 'Rect', 'ColorMatrix', 'Color',

    # Helper functions
    'lookup_code', 'blend_mode_name', 'filter_quality_name', 'filter_placement_name',
    'derive_timeline_kind', 'coerce_color', 'format_color', 'format_strength',
]
