"""
Timeline encoding package

This package turns scene mutation callbacks from an authoring-tool traversal
into frame-indexed timeline documents.
"""

from .capabilities import Capability, DocumentHandle, PropertyView, make_handle, make_linear_gradient
from .commands import (
    AttachFilter,
    Command,
    CommandEncoder,
    Mask,
    Move,
    Place,
    PlaceLooped,
    Remove,
    ReorderAfter,
    SetBlendMode,
    SetColorTransform,
    SetVisibility,
    SoundPlace,
    command_from_record,
)
from .document import Frame, Timeline, load_timeline, save_timeline, validate_timeline_document
from .errors import Diagnostic, DocumentError, EncodingFault, PropertyReadFault
from .filters import (
    AdjustColorFilter,
    BevelFilter,
    BlurFilter,
    DropShadowFilter,
    FilterEncoder,
    FilterSpec,
    GlowFilter,
    GradientBevelFilter,
    GradientGlowFilter,
    GradientStop,
    encode_filters,
)
from .frames import FrameBuffer, MaskDeferralQueue, MaskRelation
from .sdk import (  # Constants; Enums; Value types
    BLEND_MODES,
    FILTER_PLACEMENTS,
    FILTER_QUALITIES,
    Color,
    ColorMatrix,
    LabelType,
    Matrix2D,
    Rect,
    SoundSyncMode,
    TimelineKind,
)
from .writer import TimelineAssembler, TimelineWriter

__all__ = [
    "BLEND_MODES",
    "FILTER_QUALITIES",
    "FILTER_PLACEMENTS",
    "LabelType",
    "SoundSyncMode",
    "TimelineKind",
    "Matrix2D",
    "Rect",
    "ColorMatrix",
    "Color",
    "Capability",
    "DocumentHandle",
    "PropertyView",
    "make_handle",
    "make_linear_gradient",
    "Command",
    "Place",
    "PlaceLooped",
    "SoundPlace",
    "Remove",
    "ReorderAfter",
    "Mask",
    "SetBlendMode",
    "SetVisibility",
    "AttachFilter",
    "Move",
    "SetColorTransform",
    "CommandEncoder",
    "command_from_record",
    "FilterSpec",
    "DropShadowFilter",
    "BlurFilter",
    "GlowFilter",
    "BevelFilter",
    "GradientGlowFilter",
    "GradientBevelFilter",
    "AdjustColorFilter",
    "GradientStop",
    "FilterEncoder",
    "encode_filters",
    "MaskRelation",
    "MaskDeferralQueue",
    "FrameBuffer",
    "Frame",
    "Timeline",
    "TimelineAssembler",
    "TimelineWriter",
    "load_timeline",
    "save_timeline",
    "validate_timeline_document",
    "EncodingFault",
    "PropertyReadFault",
    "DocumentError",
    "Diagnostic",
]
