# animexport/utils/text.py
from __future__ import annotations

from typing import Optional, Union

from animexport.config.schemas import ScriptSettings, TextSettings

HostString = Union[str, bytes, bytearray, memoryview, None]


def to_text(value: HostString, settings: Optional[TextSettings] = None) -> str:
    """
    Transcode a host-native string into ``str``.

    Hosts hand over either Python strings or raw UTF-16 buffers; ``None`` (a
    null string pointer) becomes the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    settings = settings or TextSettings()
    raw = bytes(value)
    text = raw.decode(settings.source_encoding, errors=settings.errors)
    # Host buffers are often NUL-terminated
    return text.rstrip("\x00")


def sanitize_script(script: str, settings: Optional[ScriptSettings] = None) -> str:
    settings = settings or ScriptSettings()
    if settings.strip_carriage_returns:
        script = script.replace("\r", "")
    if settings.escape_newlines:
        script = script.replace("\n", "\\n")
    if settings.strip_tabs:
        script = script.replace("\t", "")
    return script
