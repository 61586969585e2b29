"""
Scene mutation commands and the encoder that turns host callbacks into them.

Each encoder method builds exactly one Command, appends it to the bound
command sink and returns it. Faults raised while reading upstream values
propagate before anything is appended.
"""

from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from animexport.config.schemas import EncoderConfig
from animexport.utils.logs import get_logger

from .capabilities import Capability, query, read
from .errors import UNSUPPORTED_ENUM, Diagnostic, EncodingFault, PropertyReadFault
from .filters import FilterEncoder, FilterSpec, Reporter
from .sdk import ColorMatrix, Matrix2D, Rect, SoundSyncMode, blend_mode_name

log = get_logger("animexport.commands")


# ============================================================================
# PYDANTIC MODELS
# ============================================================================

class _Command(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Place(_Command):
    """Place a shape, bitmap or text asset on the display list."""

    type: Literal["Place"] = "Place"
    asset_id: int = Field(..., alias="assetId")
    instance_id: int = Field(..., alias="instanceId")
    place_after_id: int = Field(0, alias="placeAfter")
    transform: Optional[Matrix2D] = None
    bounds: Optional[Rect] = None


class PlaceLooped(_Command):
    """Place a nested timeline (movieclip or graphic symbol)."""

    type: Literal["Place"] = "Place"
    asset_id: int = Field(..., alias="assetId")
    instance_id: int = Field(..., alias="instanceId")
    place_after_id: int = Field(0, alias="placeAfter")
    transform: Optional[Matrix2D] = None
    instance_name: Optional[str] = Field(None, alias="instanceName")
    loop: bool
    is_graphic: bool = Field(..., alias="isGraphic")


class SoundPlace(_Command):
    type: Literal["SoundPlace"] = "SoundPlace"
    asset_id: int = Field(..., alias="assetId")
    instance_id: int = Field(..., alias="instanceId")
    loop_mode: Optional[int] = Field(None, alias="loopMode")
    repeat_count: Optional[int] = Field(None, alias="repeatCount")
    sync_mode: Optional[int] = Field(None, alias="syncMode")
    limit_in_samples: Optional[int] = Field(None, alias="LimitInPos44")
    limit_out_samples: Optional[int] = Field(None, alias="LimitOutPos44")


class Remove(_Command):
    type: Literal["Remove"] = "Remove"
    instance_id: int = Field(..., alias="instanceId")


class ReorderAfter(_Command):
    type: Literal["ZOrder"] = "ZOrder"
    instance_id: int = Field(..., alias="instanceId")
    place_after_id: int = Field(0, alias="placeAfter")


class Mask(_Command):
    type: Literal["Mask"] = "Mask"
    instance_id: int = Field(..., alias="instanceId")
    mask_till_id: int = Field(..., alias="maskTill")


class SetBlendMode(_Command):
    type: Literal["BlendMode"] = "BlendMode"
    instance_id: int = Field(..., alias="instanceId")
    blend_mode: Optional[str] = Field(None, alias="blendMode")


class SetVisibility(_Command):
    type: Literal["Visibility"] = "Visibility"
    instance_id: int = Field(..., alias="instanceId")
    visible: bool = Field(..., alias="visibility")


class AttachFilter(_Command):
    type: Literal["Filter"] = "Filter"
    instance_id: int = Field(..., alias="instanceId")
    filters: Tuple[FilterSpec, ...] = ()


class Move(_Command):
    type: Literal["Move"] = "Move"
    instance_id: int = Field(..., alias="instanceId")
    transform: Matrix2D


class SetColorTransform(_Command):
    type: Literal["ColorTransform"] = "ColorTransform"
    instance_id: int = Field(..., alias="instanceId")
    color_matrix: ColorMatrix = Field(..., alias="colorMatrix")


Command = Union[
    Place,
    PlaceLooped,
    SoundPlace,
    Remove,
    ReorderAfter,
    Mask,
    SetBlendMode,
    SetVisibility,
    AttachFilter,
    Move,
    SetColorTransform,
]

_BY_TYPE = {
    "SoundPlace": SoundPlace,
    "Remove": Remove,
    "ZOrder": ReorderAfter,
    "Mask": Mask,
    "BlendMode": SetBlendMode,
    "Visibility": SetVisibility,
    "Filter": AttachFilter,
    "Move": Move,
    "ColorTransform": SetColorTransform,
}


def command_from_record(record: Dict[str, Any]) -> Command:
    """Rebuild a Command from its serialized record."""
    kind = record.get("type")
    if kind == "Place":
        # Nested timeline placements always carry the loop flag
        model = PlaceLooped if "loop" in record else Place
    else:
        model = _BY_TYPE.get(kind)
        if model is None:
            raise ValueError(f"Unknown command type: {kind!r}")
    return model.model_validate(record)


# ============================================================================
# ENCODER
# ============================================================================

def _log_diagnostic(diagnostic: Diagnostic) -> None:
    log.debug("%s", diagnostic)


def _read_int(view: Any, capability: Capability, prop: str, *args: Any) -> int:
    value = read(view, capability, prop, *args)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise PropertyReadFault(capability.value, prop, f"not an integer: {value!r}") from e


class CommandEncoder:
    """
    Map scene mutation callbacks onto Command records.

    ``sink`` receives every encoded command (a FrameBuffer's ``append`` or a
    plain ``list.append``); the encoder itself keeps no per-frame state.
    """

    def __init__(
        self,
        sink: Callable[[Command], None],
        config: Optional[EncoderConfig] = None,
        report: Optional[Reporter] = None,
    ):
        self.sink = sink
        self.config = config or EncoderConfig()
        self.report = report or _log_diagnostic
        self.filters = FilterEncoder(self.config, self.report)

    def _emit(self, model: type, **fields: Any) -> Any:
        try:
            command = model(**fields)
        except ValidationError as e:
            raise EncodingFault(f"Invalid {model.__name__} values: {e}") from e
        self.sink(command)
        return command

    def place(
        self,
        asset_id: int,
        instance_id: int,
        place_after_id: int,
        transform: Any = None,
        bounds: Any = None,
    ) -> Place:
        return self._emit(
            Place,
            asset_id=asset_id,
            instance_id=instance_id,
            place_after_id=place_after_id,
            transform=transform,
            bounds=bounds,
        )

    def place_looped(
        self,
        asset_id: int,
        instance_id: int,
        place_after_id: int,
        transform: Any = None,
        loop: bool = False,
        instance_name: Optional[str] = None,
        is_graphic: bool = False,
    ) -> PlaceLooped:
        return self._emit(
            PlaceLooped,
            asset_id=asset_id,
            instance_id=instance_id,
            place_after_id=place_after_id,
            transform=transform,
            instance_name=instance_name or None,
            loop=bool(loop),
            is_graphic=bool(is_graphic),
        )

    def place_sound(self, asset_id: int, instance_id: int, handle: Any = None) -> SoundPlace:
        """
        Cue a sound. Handles without the sound capability produce a bare
        placement with no loop, sync or limit fields.
        """
        fields: Dict[str, Any] = {}
        cap = Capability.SOUND
        sound = query(handle, cap)
        if sound is not None:
            loop = read(sound, cap, "loop_mode")
            fields["loop_mode"] = self._part(loop, "loop_mode", "mode")
            fields["repeat_count"] = self._part(loop, "loop_mode", "repeat_count")
            sync_mode = _read_int(sound, cap, "sync_mode")
            if sync_mode == SoundSyncMode.STOP:
                # Stop cues are delivered as Remove commands
                raise EncodingFault(f"Sound instance {instance_id} placed with stop sync mode")
            fields["sync_mode"] = sync_mode
            limit = read(sound, cap, "sound_limit")
            fields["limit_in_samples"] = self._part(limit, "sound_limit", "in_pos44")
            fields["limit_out_samples"] = self._part(limit, "sound_limit", "out_pos44")
        return self._emit(SoundPlace, asset_id=asset_id, instance_id=instance_id, **fields)

    @staticmethod
    def _part(value: Any, prop: str, key: str) -> int:
        """Pull one integer member out of a struct-like sound property."""
        try:
            part = value[key] if isinstance(value, dict) else getattr(value, key)
            return int(part)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise PropertyReadFault(Capability.SOUND.value, f"{prop}.{key}", str(e)) from e

    def remove(self, instance_id: int) -> Remove:
        return self._emit(Remove, instance_id=instance_id)

    def reorder_after(self, instance_id: int, place_after_id: int) -> ReorderAfter:
        return self._emit(ReorderAfter, instance_id=instance_id, place_after_id=place_after_id)

    def mask(self, instance_id: int, mask_till_id: int) -> Mask:
        return self._emit(Mask, instance_id=instance_id, mask_till_id=mask_till_id)

    def blend_mode(self, instance_id: int, mode: Any) -> SetBlendMode:
        name = blend_mode_name(mode)
        if name is None:
            self.report(
                Diagnostic(UNSUPPORTED_ENUM, f"Unknown blend mode {mode!r}; blendMode omitted",
                           {"instance_id": instance_id, "code": mode})
            )
        return self._emit(SetBlendMode, instance_id=instance_id, blend_mode=name)

    def visibility(self, instance_id: int, visible: bool) -> SetVisibility:
        return self._emit(SetVisibility, instance_id=instance_id, visible=bool(visible))

    def attach_filter(self, instance_id: int, handle: Any) -> AttachFilter:
        specs: List[FilterSpec] = self.filters.encode(handle)
        return self._emit(AttachFilter, instance_id=instance_id, filters=tuple(specs))

    def move(self, instance_id: int, transform: Any) -> Move:
        return self._emit(Move, instance_id=instance_id, transform=transform)

    def color_transform(self, instance_id: int, color_matrix: Any) -> SetColorTransform:
        return self._emit(SetColorTransform, instance_id=instance_id, color_matrix=color_matrix)
