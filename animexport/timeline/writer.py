"""
TimelineWriter: the callback surface a document traversal drives.

One writer encodes one timeline. Mutation callbacks append commands to the
open frame, ``show_frame`` closes it, and ``finish`` produces the Timeline.

    writer = TimelineWriter()
    writer.place_object(1, 10, 0, transform=[1, 0, 0, 1, 20, 30])
    writer.update_mask(10, 20)
    writer.show_frame(0)
    timeline = writer.finish(0, None, "stage")
"""

import logging
from typing import Any, List, Optional

from animexport.config.schemas import EncoderConfig
from animexport.utils.logs import audit_event, get_logger
from animexport.utils.text import HostString, to_text

from .commands import AttachFilter, CommandEncoder, Move, Place, PlaceLooped, Remove, ReorderAfter
from .commands import SetBlendMode, SetColorTransform, SetVisibility, SoundPlace
from .document import Frame, Timeline
from .errors import USAGE, Diagnostic
from .frames import FrameBuffer, MaskDeferralQueue, MaskRelation
from .sdk import LabelType, derive_timeline_kind

log = get_logger("animexport.writer")


class TimelineAssembler:
    """Owns the committed frames and the running frame count of one timeline."""

    def __init__(self):
        self.frames: List[Frame] = []
        self.total_frames = 0
        self.asset_id: Optional[int] = None
        self.name: Optional[str] = None
        self.instance_name: Optional[str] = None

    def commit(self, frame: Optional[Frame]) -> None:
        """Add a sealed frame; suppressed (None) frames still consume a tick."""
        if frame is not None:
            self.frames.append(frame)
        self.total_frames += 1

    def finalize(self, asset_id: int, name: str, instance_name: Optional[str] = None) -> Timeline:
        self.asset_id = asset_id
        self.name = name
        self.instance_name = instance_name
        return Timeline(
            asset_id=asset_id,
            kind=derive_timeline_kind(asset_id, instance_name),
            name=name,
            total_frames=self.total_frames,
            frames=tuple(self.frames),
        )


class TimelineWriter:
    def __init__(self, config: Optional[EncoderConfig] = None):
        self.config = config or EncoderConfig()
        get_logger(level=self.config.log_level)
        self.diagnostics: List[Diagnostic] = []
        self.buffer = FrameBuffer(self.config, self._report)
        self.masks = MaskDeferralQueue()
        self.assembler = TimelineAssembler()
        self.encoder = CommandEncoder(self.buffer.append, self.config, self._report)
        self.timeline: Optional[Timeline] = None

    def _report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        level = logging.WARNING if diagnostic.code == USAGE else logging.DEBUG
        log.log(level, "%s", diagnostic.message)

    def _text(self, value: HostString) -> str:
        return to_text(value, self.config.text)

    @property
    def frame_count(self) -> int:
        return self.assembler.total_frames

    # ------------------------------------------------------------------
    # display list
    # ------------------------------------------------------------------

    def place_object(
        self,
        asset_id: int,
        instance_id: int,
        place_after_id: int,
        transform: Any = None,
        bounds: Any = None,
    ) -> Place:
        return self.encoder.place(asset_id, instance_id, place_after_id, transform, bounds)

    def place_timeline_object(
        self,
        asset_id: int,
        instance_id: int,
        place_after_id: int,
        transform: Any = None,
        loop: bool = False,
        instance_name: HostString = None,
        handle: Any = None,
        is_graphic: bool = False,
    ) -> PlaceLooped:
        # ``handle`` is unused: nested timelines expose nothing the encoder reads
        return self.encoder.place_looped(
            asset_id,
            instance_id,
            place_after_id,
            transform,
            loop=loop,
            instance_name=self._text(instance_name),
            is_graphic=is_graphic,
        )

    def place_sound(self, asset_id: int, instance_id: int, handle: Any = None) -> SoundPlace:
        return self.encoder.place_sound(asset_id, instance_id, handle)

    def remove_object(self, instance_id: int) -> Remove:
        return self.encoder.remove(instance_id)

    def update_z_order(self, instance_id: int, place_after_id: int) -> ReorderAfter:
        return self.encoder.reorder_after(instance_id, place_after_id)

    def update_mask(self, instance_id: int, mask_till_id: int) -> MaskRelation:
        """Declare a mask; the Mask command is appended when the frame closes."""
        return self.masks.declare(instance_id, mask_till_id)

    def update_blend_mode(self, instance_id: int, blend_mode: Any) -> SetBlendMode:
        return self.encoder.blend_mode(instance_id, blend_mode)

    def update_visibility(self, instance_id: int, visible: bool) -> SetVisibility:
        return self.encoder.visibility(instance_id, visible)

    def add_graphic_filter(self, instance_id: int, handle: Any) -> AttachFilter:
        return self.encoder.attach_filter(instance_id, handle)

    def update_display_transform(self, instance_id: int, matrix: Any) -> Move:
        return self.encoder.move(instance_id, matrix)

    def update_color_transform(self, instance_id: int, color_matrix: Any) -> SetColorTransform:
        return self.encoder.color_transform(instance_id, color_matrix)

    # ------------------------------------------------------------------
    # frames
    # ------------------------------------------------------------------

    def show_frame(self, frame_number: int) -> Optional[Frame]:
        frame = self.buffer.commit(frame_number, self.masks)
        self.assembler.commit(frame)
        if frame is None:
            log.debug("Frame %d has no content; not emitted", frame_number)
        return frame

    def add_frame_script(self, script: HostString, layer_number: int = 0) -> str:
        return self.buffer.add_script(self._text(script), layer_number)

    def remove_frame_script(self, layer_number: int) -> None:
        self.buffer.remove_script(layer_number)

    def set_frame_label(self, label: HostString, label_type: int = LabelType.NAME) -> bool:
        return self.buffer.add_label(self._text(label), label_type)

    # ------------------------------------------------------------------
    # completion
    # ------------------------------------------------------------------

    def finish(self, asset_id: int, instance_name: HostString, name: str) -> Timeline:
        """
        Stamp identity and frame count onto the committed frames.

        ``instance_name`` is None for graphic symbols; any value (even empty)
        marks a movieclip. Calling finish again re-derives from current state.
        """
        if self.buffer.has_content or len(self.masks):
            log.warning("Timeline %r finished with an open frame; uncommitted content dropped", name)
        if instance_name is not None:
            instance_name = self._text(instance_name)
        self.timeline = self.assembler.finalize(asset_id, self._text(name), instance_name)
        log.info(
            "Timeline %r (%s) finished: %d frames, %d emitted",
            self.timeline.name,
            self.timeline.kind.value,
            self.timeline.total_frames,
            len(self.timeline.frames),
        )
        if self.config.audit_log:
            audit_event(
                self.config.audit_log,
                "timeline_finish",
                "ok",
                asset_id=asset_id,
                name=self.timeline.name,
                type=self.timeline.kind.value,
                total_frames=self.timeline.total_frames,
                emitted_frames=len(self.timeline.frames),
                diagnostics=len(self.diagnostics),
            )
        return self.timeline
