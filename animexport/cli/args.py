import argparse


def build_common_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(add_help=False)
    ap.add_argument("--config", default=None, help="Path to encoder config YAML (default: conf/encoder.yaml)")
    ap.add_argument("--color-format", choices=["#", "0x"], default=None, help="Color prefix override")
    ap.add_argument("--log-level", default=None, help="Logger level override (DEBUG, INFO, ...)")
    ap.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return ap


def config_overrides(args: argparse.Namespace) -> dict:
    """CLI flags that map onto EncoderConfig keys."""
    out = {}
    if getattr(args, "color_format", None):
        out["color_format"] = args.color_format
    if getattr(args, "log_level", None):
        out["log_level"] = args.log_level
    elif getattr(args, "verbose", False):
        out["log_level"] = "DEBUG"
    return out
