# animexport/utils/logs.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

_LOGGER_INITIALIZED = False
_ROOT_NAME = "animexport"


def get_logger(name: str = _ROOT_NAME, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Return a logger under the ``animexport`` namespace.

    The namespace root gets a single stream handler the first time any logger
    is requested; children propagate into it.
    """
    global _LOGGER_INITIALIZED
    if name != _ROOT_NAME and not name.startswith(_ROOT_NAME + "."):
        name = f"{_ROOT_NAME}.{name}"
    root = logging.getLogger(_ROOT_NAME)
    if not _LOGGER_INITIALIZED:
        root.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        handler.setFormatter(fmt)
        root.addHandler(handler)
        root.propagate = False
        _LOGGER_INITIALIZED = True
    if level is not None:
        root.setLevel(level)
    return logging.getLogger(name)


def _json_default(o: Any) -> Any:
    try:
        return str(o)
    except Exception:
        return None


def audit_event(path: Union[str, Path], step: str, status: str, **fields: Any) -> None:
    """
    Append a structured JSON line to ``path`` with ts, step, status, and extra fields.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    record: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "step": step,
        "status": status,
    }
    if fields:
        record.update(fields)
    line = json.dumps(record, default=_json_default)
    with p.open("a", encoding="utf-8") as fh:
        fh.write(line + "\n")
