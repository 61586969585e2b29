from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Shared literals
ColorFormat = Literal["#", "0x"]

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ScriptSettings(BaseModel):
    """Rules applied to frame script text before it enters a frame."""

    strip_carriage_returns: bool = True
    escape_newlines: bool = True
    strip_tabs: bool = True

    model_config = ConfigDict(extra="allow")


class TextSettings(BaseModel):
    """How host-native strings (UTF-16 buffers) are transcoded."""

    source_encoding: str = "utf-16-le"
    errors: Literal["strict", "replace", "ignore"] = "replace"

    model_config = ConfigDict(extra="allow")


class EncoderConfig(BaseModel):
    scripts: ScriptSettings = ScriptSettings()
    text: TextSettings = TextSettings()
    color_format: ColorFormat = "#"
    log_level: str = Field("INFO", description="Level for the animexport logger")
    audit_log: Optional[str] = Field(None, description="JSONL file receiving finish events")

    model_config = ConfigDict(extra="allow")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {sorted(_LOG_LEVELS)}")
        return level
