"""
Per-frame buffering: the deferred mask queue and the frame accumulator.

Masks declared during a frame are held back and appended when the frame
closes, so every Mask command lands after all other commands of its frame.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from animexport.config.schemas import EncoderConfig
from animexport.utils.logs import get_logger
from animexport.utils.text import sanitize_script

from .commands import Command, Mask
from .document import Frame
from .errors import USAGE, Diagnostic
from .filters import Reporter
from .sdk import LabelType

log = get_logger("animexport.frames")


@dataclass(frozen=True)
class MaskRelation:
    instance_id: int
    mask_till_id: int


class MaskDeferralQueue:
    """Mask declarations waiting for the next frame boundary."""

    def __init__(self):
        self._pending: List[MaskRelation] = []

    def declare(self, instance_id: int, mask_till_id: int) -> MaskRelation:
        relation = MaskRelation(instance_id, mask_till_id)
        self._pending.append(relation)
        return relation

    @property
    def pending(self) -> List[MaskRelation]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self, sink: Callable[[Command], None]) -> int:
        """Append one Mask per pending relation, in declaration order, then clear."""
        flushed = 0
        for relation in self._pending:
            sink(Mask(instance_id=relation.instance_id, mask_till_id=relation.mask_till_id))
            flushed += 1
        self._pending.clear()
        return flushed


class FrameState(str, Enum):
    OPEN = "open"
    CLOSING = "closing"
    SEALED = "sealed"


def _log_diagnostic(diagnostic: Diagnostic) -> None:
    log.warning("%s", diagnostic.message)


class FrameBuffer:
    """Accumulates the commands, labels and scripts of the frame being built."""

    def __init__(self, config: Optional[EncoderConfig] = None, report: Optional[Reporter] = None):
        self.config = config or EncoderConfig()
        self.report = report or _log_diagnostic
        self.commands: List[Command] = []
        self.labels: List[str] = []
        self.scripts: List[str] = []
        self.state = FrameState.OPEN

    def append(self, command: Command) -> None:
        self.commands.append(command)

    @property
    def has_content(self) -> bool:
        return bool(self.commands or self.labels or self.scripts)

    def add_label(self, label: str, label_type: int = LabelType.NAME) -> bool:
        """Record a frame label. Only named labels reach the document."""
        try:
            kind = LabelType(int(label_type))
        except (TypeError, ValueError):
            kind = None
        if kind == LabelType.NAME:
            self.labels.append(label)
            return True
        if kind == LabelType.COMMENT:
            self.report(Diagnostic(USAGE, f"Comment frame label type is ignored: '{label}'", {"label": label}))
        elif kind == LabelType.ANCHOR:
            self.report(Diagnostic(USAGE, f"Anchor frame label type is ignored: '{label}'", {"label": label}))
        else:
            log.debug("Frame label %r with type %r ignored", label, label_type)
        return False

    def add_script(self, script: str, layer: Optional[int] = None) -> str:
        clean = sanitize_script(script, self.config.scripts)
        self.scripts.append(clean)
        return clean

    def remove_script(self, layer: int) -> None:
        self.report(
            Diagnostic(
                USAGE,
                f"Frame scripts cannot be added to empty keyframes. (Layer: {layer})",
                {"layer": layer},
            )
        )

    def commit(self, frame_number: int, masks: Optional[MaskDeferralQueue] = None) -> Optional[Frame]:
        """
        Close the frame: flush deferred masks, seal the logs into a Frame when
        anything was recorded, and reset for the next frame.

        Returns None for a frame with no labels, commands or scripts.
        """
        self.state = FrameState.CLOSING
        if masks is not None:
            masks.flush(self.append)
        frame = None
        if self.has_content:
            frame = Frame(
                frame=frame_number,
                labels=tuple(self.labels),
                commands=tuple(self.commands),
                scripts=tuple(self.scripts),
            )
        self.state = FrameState.SEALED
        self.reset()
        return frame

    def reset(self) -> None:
        self.commands = []
        self.labels = []
        self.scripts = []
        self.state = FrameState.OPEN
