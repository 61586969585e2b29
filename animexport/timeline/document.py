#!/usr/bin/env python3
"""
Timeline document models and file helpers.

A Timeline is the finalized, immutable record of one encoded scene or symbol.
Serialization is sparse: empty label, command and script collections are left
out of a frame record, and ``assetId`` is left out for the stage.
"""

import json
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .commands import Command, command_from_record
from .errors import DocumentError
from .sdk import STAGE_ASSET_ID, TimelineKind


# ============================================================================
# PYDANTIC MODELS
# ============================================================================

class Frame(BaseModel):
    """One sealed frame: labels, commands and scripts in emission order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    frame: int = Field(..., ge=0, description="Zero-based frame number")
    labels: Tuple[str, ...] = ()
    commands: Tuple[Command, ...] = ()
    scripts: Tuple[str, ...] = ()

    @field_validator("commands", mode="before")
    @classmethod
    def parse_commands(cls, v):
        if isinstance(v, (list, tuple)):
            return tuple(command_from_record(c) if isinstance(c, dict) else c for c in v)
        return v

    @property
    def is_empty(self) -> bool:
        return not (self.labels or self.commands or self.scripts)

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"frame": self.frame}
        if self.labels:
            record["labels"] = list(self.labels)
        if self.commands:
            record["commands"] = [c.to_record() for c in self.commands]
        if self.scripts:
            record["scripts"] = list(self.scripts)
        return record


class Timeline(BaseModel):
    """Finalized timeline of one animated asset."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    asset_id: int = Field(STAGE_ASSET_ID, ge=0, alias="assetId")
    kind: TimelineKind = Field(..., alias="type")
    name: str = ""
    total_frames: int = Field(0, ge=0, alias="totalFrames")
    frames: Tuple[Frame, ...] = ()

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {}
        if self.asset_id != STAGE_ASSET_ID:
            doc["assetId"] = self.asset_id
        doc["type"] = self.kind.value
        doc["name"] = self.name
        doc["totalFrames"] = self.total_frames
        doc["frames"] = [f.to_record() for f in self.frames]
        return doc

    def frame(self, number: int) -> Frame:
        """Return the emitted frame with this number; suppressed frames raise KeyError."""
        for f in self.frames:
            if f.frame == number:
                return f
        raise KeyError(number)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def validate_timeline_document(data: Union[Dict, Timeline]) -> Timeline:
    """Validate and return a Timeline instance."""
    if isinstance(data, Timeline):
        return data
    if not isinstance(data, dict):
        raise TypeError("Data must be a dict or Timeline instance")
    try:
        return Timeline.model_validate(data)
    except (ValidationError, ValueError) as e:
        raise DocumentError(f"Invalid timeline document: {e}") from e


def timeline_to_json(timeline: Timeline, indent: int = 2) -> str:
    return json.dumps(timeline.to_document(), indent=indent)


def save_timeline(timeline: Timeline, path: Union[str, Path]) -> Path:
    """Save a Timeline document to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(timeline.to_document(), f, indent=2)
    return path


def load_timeline(path: Union[str, Path]) -> Timeline:
    """Load a Timeline document from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Invalid JSON in {path}: {e}") from e
    return validate_timeline_document(data)
