# animexport/utils/config.py
import os
from typing import Any, Dict, Optional

from pathlib import Path

try:
    import yaml
except Exception as e:  # pragma: no cover
    raise RuntimeError("PyYAML is required: pip install pyyaml") from e

from animexport.config.schemas import EncoderConfig

DEFAULT_CONFIG_PATH = "conf/encoder.yaml"


def _read_yaml(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    with p.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"YAML at {path} must be a mapping/object.")
        return data


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overlay() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if os.getenv("ANIMEXPORT_LOG_LEVEL"):
        out["log_level"] = os.getenv("ANIMEXPORT_LOG_LEVEL")
    if os.getenv("ANIMEXPORT_COLOR_FORMAT"):
        out["color_format"] = os.getenv("ANIMEXPORT_COLOR_FORMAT")
    if os.getenv("ANIMEXPORT_AUDIT_LOG"):
        out["audit_log"] = os.getenv("ANIMEXPORT_AUDIT_LOG")
    if os.getenv("ANIMEXPORT_TEXT_ENCODING"):
        out.setdefault("text", {})["source_encoding"] = os.getenv("ANIMEXPORT_TEXT_ENCODING")
    return out


def load_encoder_config(
    path: Optional[str] = None, *, cli_overrides: Optional[Dict[str, Any]] = None
) -> EncoderConfig:
    """
    Load and validate the encoder config with strict precedence.
    Precedence (low -> high):
      1) Defaults baked into EncoderConfig
      2) conf/encoder.yaml (or ``path``)
      3) Environment variables (ANIMEXPORT_*)
      4) CLI overrides
    """
    if path is None:
        path = os.getenv("ANIMEXPORT_CONFIG", DEFAULT_CONFIG_PATH)
    merged = _read_yaml(path)
    merged = _deep_merge(merged, _env_overlay())
    if cli_overrides:
        merged = _deep_merge(merged, cli_overrides)
    return EncoderConfig(**merged)
