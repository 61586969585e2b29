#!/usr/bin/env python3
"""
Event Replay - Drive a TimelineWriter from a recorded event log

An event log is a JSON or YAML mapping:

    name: hero
    asset_id: 7
    instance_name: hero_mc        # omit for graphic symbols
    events:
      - {op: place, asset_id: 1, instance_id: 10, place_after: 0, transform: [1, 0, 0, 1, 0, 0]}
      - {op: filter, instance_id: 10, filter: {blur: {enabled: true, blur_x: 4, blur_y: 4, quality: low}}}
      - {op: mask, instance_id: 10, mask_till: 20}
      - {op: show_frame, frame: 0}

Filter and sound properties become in-memory capability handles, so a log
exercises the same code paths as a live authoring-tool traversal.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

import yaml

from animexport.cli.args import build_common_parser, config_overrides
from animexport.config.schemas import EncoderConfig
from animexport.utils.config import load_encoder_config
from animexport.utils.logs import get_logger

from .capabilities import Capability, DocumentHandle, make_linear_gradient
from .document import Timeline, save_timeline
from .errors import DocumentError, EncodingFault
from .sdk import FILTER_PLACEMENTS, FILTER_QUALITIES, BLEND_MODES, LabelType, SoundSyncMode
from .writer import TimelineWriter

log = get_logger("animexport.replay")


def _code(value: Any, names) -> Any:
    """Accept wire names ("high", "Multiply") where the host would send a code."""
    if isinstance(value, str) and value in names:
        return names.index(value)
    return value


def _label_type(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return LabelType[value.upper()]
        except KeyError:
            raise DocumentError(f"Unknown label type: {value!r}") from None
    return value


def filter_handle(spec: Mapping[str, Mapping[str, Any]]) -> DocumentHandle:
    """Build a filter handle exposing one view per capability named in ``spec``."""
    views: Dict[Capability, Dict[str, Any]] = {}
    for name, props in spec.items():
        try:
            capability = Capability(name)
        except ValueError:
            raise DocumentError(f"Unknown filter capability: {name!r}") from None
        props = dict(props or {})
        if "quality" in props:
            props["quality"] = _code(props["quality"], FILTER_QUALITIES)
        if "placement" in props:
            props["placement"] = _code(props["placement"], FILTER_PLACEMENTS)
        gradient = props.get("gradient")
        if isinstance(gradient, list):
            props["gradient"] = make_linear_gradient(
                (s["pos"], s["color"]) if isinstance(s, Mapping) else s for s in gradient
            )
        views[capability] = props
    return DocumentHandle(views)


def _sync_mode(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return SoundSyncMode[value.upper()]
        except KeyError:
            raise DocumentError(f"Unknown sound sync mode: {value!r}") from None
    return value


def sound_handle(spec: Optional[Mapping[str, Any]]) -> Optional[DocumentHandle]:
    if not spec:
        return None
    props = dict(spec)
    if "sync_mode" in props:
        props["sync_mode"] = _sync_mode(props["sync_mode"])
    return DocumentHandle({Capability.SOUND: props})


def _dispatch(writer: TimelineWriter) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
    return {
        "place": lambda e: writer.place_object(
            e["asset_id"], e["instance_id"], e.get("place_after", 0), e.get("transform"), e.get("bounds")
        ),
        "place_timeline": lambda e: writer.place_timeline_object(
            e["asset_id"],
            e["instance_id"],
            e.get("place_after", 0),
            e.get("transform"),
            loop=e.get("loop", False),
            instance_name=e.get("instance_name"),
            is_graphic=e.get("is_graphic", False),
        ),
        "place_sound": lambda e: writer.place_sound(e["asset_id"], e["instance_id"], sound_handle(e.get("sound"))),
        "remove": lambda e: writer.remove_object(e["instance_id"]),
        "z_order": lambda e: writer.update_z_order(e["instance_id"], e.get("place_after", 0)),
        "mask": lambda e: writer.update_mask(e["instance_id"], e["mask_till"]),
        "blend_mode": lambda e: writer.update_blend_mode(e["instance_id"], _code(e["mode"], BLEND_MODES)),
        "visibility": lambda e: writer.update_visibility(e["instance_id"], e["visible"]),
        "filter": lambda e: writer.add_graphic_filter(e["instance_id"], filter_handle(e.get("filter") or {})),
        "move": lambda e: writer.update_display_transform(e["instance_id"], e["transform"]),
        "color_transform": lambda e: writer.update_color_transform(e["instance_id"], e["color_matrix"]),
        "script": lambda e: writer.add_frame_script(e["script"], e.get("layer", 0)),
        "remove_script": lambda e: writer.remove_frame_script(e.get("layer", 0)),
        "label": lambda e: writer.set_frame_label(e["label"], _label_type(e.get("label_type", LabelType.NAME))),
        "show_frame": lambda e: writer.show_frame(e["frame"]),
    }


def replay_events(events: Iterable[Dict[str, Any]], writer: Optional[TimelineWriter] = None) -> TimelineWriter:
    """Apply each event to ``writer`` (a fresh one by default) in order."""
    writer = writer or TimelineWriter()
    handlers = _dispatch(writer)
    for index, event in enumerate(events):
        if not isinstance(event, Mapping) or "op" not in event:
            raise DocumentError(f"Event {index}: must be an object with an 'op' field")
        handler = handlers.get(event["op"])
        if handler is None:
            raise DocumentError(f"Event {index}: unknown op {event['op']!r}")
        try:
            handler(event)
        except KeyError as e:
            raise DocumentError(f"Event {index} ({event['op']}): missing field {e}") from e
        except EncodingFault:
            log.error("Event %d (%s) could not be encoded", index, event["op"])
            raise
    return writer


def replay_document(data: Dict[str, Any], config: Optional[EncoderConfig] = None) -> Timeline:
    """Encode a full event log into a finalized Timeline."""
    if not isinstance(data, Mapping):
        raise DocumentError("Event log must be a mapping with an 'events' list")
    events = data.get("events")
    if not isinstance(events, list):
        raise DocumentError("Event log needs an 'events' list")
    writer = replay_events(events, TimelineWriter(config))
    return writer.finish(data.get("asset_id", 0), data.get("instance_name"), data.get("name", ""))


def load_event_log(source: Union[str, Path]) -> Dict[str, Any]:
    """Read an event log from .json or .yaml/.yml."""
    p = Path(source)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Invalid JSON in {p}: {e}") from e
    if not isinstance(data, dict):
        raise DocumentError(f"Event log at {p} must be a mapping/object.")
    return data


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for event replay."""
    parser = argparse.ArgumentParser(description="Encode a timeline document from an event log",
                                     parents=[build_common_parser()])
    parser.add_argument("--in", dest="input_file", required=True, help="Event log (JSON or YAML)")
    parser.add_argument("--out", dest="output_file", required=True, help="Timeline JSON to write")
    args = parser.parse_args(argv)

    config = load_encoder_config(args.config, cli_overrides=config_overrides(args))
    get_logger(level=config.log_level)

    input_path = Path(args.input_file)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}")
        return 1

    try:
        timeline = replay_document(load_event_log(input_path), config)
    except (DocumentError, EncodingFault) as e:
        print(f"Error: {e}")
        return 1

    out = save_timeline(timeline, args.output_file)
    print(f"Wrote {timeline.kind.value} timeline '{timeline.name}' to {out}")
    if args.verbose:
        print(f"  Total frames: {timeline.total_frames}")
        print(f"  Emitted frames: {len(timeline.frames)}")
        print(f"  Commands: {sum(len(f.commands) for f in timeline.frames)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
