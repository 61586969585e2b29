#!/usr/bin/env python3
"""
Timeline Validator - Validate encoded timeline documents

Checks a serialized timeline against the schema and against the ordering
rules the playback runtime depends on, and provides detailed feedback.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from animexport.cli.args import build_common_parser, config_overrides
from animexport.utils.config import load_encoder_config
from animexport.utils.logs import get_logger

from .commands import AttachFilter, Mask, Place, PlaceLooped, Remove, SoundPlace
from .document import Frame, Timeline, validate_timeline_document
from .errors import DocumentError
from .sdk import BOTTOM_OF_DISPLAY_LIST, STAGE_ASSET_ID, TimelineKind

log = get_logger("animexport.validate")

_PLACEMENTS = (Place, PlaceLooped, SoundPlace)


def validate_identity(timeline: Timeline) -> List[str]:
    """The stage is the only timeline without an asset id."""
    errors = []
    if timeline.kind == TimelineKind.STAGE and timeline.asset_id != STAGE_ASSET_ID:
        errors.append(f"stage timeline must not carry assetId (got {timeline.asset_id})")
    if timeline.kind != TimelineKind.STAGE and timeline.asset_id == STAGE_ASSET_ID:
        errors.append(f"{timeline.kind.value} timeline needs a non-zero assetId")
    return errors


def validate_frame_order(timeline: Timeline) -> List[str]:
    errors = []
    previous = -1
    for f in timeline.frames:
        if f.frame <= previous:
            errors.append(f"Frame {f.frame}: frame numbers must be strictly ascending (after {previous})")
        if f.frame >= timeline.total_frames:
            errors.append(f"Frame {f.frame}: outside totalFrames ({timeline.total_frames})")
        if f.is_empty:
            errors.append(f"Frame {f.frame}: empty frames must not be emitted")
        previous = max(previous, f.frame)
    return errors


def validate_masks_last(frame: Frame) -> List[str]:
    """Within a frame every Mask follows every other command."""
    errors = []
    seen_mask = False
    for index, command in enumerate(frame.commands):
        if isinstance(command, Mask):
            seen_mask = True
        elif seen_mask:
            errors.append(f"Frame {frame.frame}, Command {index}: {command.type} after a Mask command")
    return errors


def validate_filters(frame: Frame) -> List[str]:
    errors = []
    for index, command in enumerate(frame.commands):
        if isinstance(command, AttachFilter) and not command.filters:
            errors.append(f"Frame {frame.frame}, Command {index}: Filter command without filter blocks")
    return errors


def check_references(timeline: Timeline) -> List[str]:
    """
    Track the display list across frames and report commands that reference
    instances which are not placed. These are host contract problems, so they
    are reported as warnings.
    """
    warnings = []
    placed: Set[int] = set()
    for f in timeline.frames:
        for index, command in enumerate(f.commands):
            where = f"Frame {f.frame}, Command {index}"
            if isinstance(command, _PLACEMENTS):
                if command.instance_id in placed:
                    warnings.append(f"{where}: instance {command.instance_id} placed twice")
                placed.add(command.instance_id)
                after = getattr(command, "place_after_id", BOTTOM_OF_DISPLAY_LIST)
                if after != BOTTOM_OF_DISPLAY_LIST and after not in placed:
                    warnings.append(f"{where}: placeAfter {after} is not on the display list")
                continue
            if command.instance_id not in placed:
                warnings.append(f"{where}: {command.type} references unplaced instance {command.instance_id}")
            if isinstance(command, Remove):
                placed.discard(command.instance_id)
            elif isinstance(command, Mask) and command.mask_till_id not in placed:
                warnings.append(f"{where}: maskTill {command.mask_till_id} is not on the display list")
    return warnings


def validate_document(data: Dict) -> Tuple[List[str], List[str], Optional[Timeline]]:
    """Return (errors, warnings, timeline) for a serialized document."""
    try:
        timeline = validate_timeline_document(data)
    except (DocumentError, TypeError) as e:
        return [str(e)], [], None

    errors = validate_identity(timeline)
    errors.extend(validate_frame_order(timeline))
    for f in timeline.frames:
        errors.extend(validate_masks_last(f))
        errors.extend(validate_filters(f))
    warnings = check_references(timeline)
    return errors, warnings, timeline


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for timeline validation."""
    parser = argparse.ArgumentParser(description="Validate timeline documents", parents=[build_common_parser()])
    parser.add_argument("--in", dest="input_file", required=True, help="Input timeline JSON file")
    parser.add_argument("--strict", action="store_true", help="Treat reference warnings as errors")
    args = parser.parse_args(argv)

    config = load_encoder_config(args.config, cli_overrides=config_overrides(args))
    get_logger(level=config.log_level)

    input_path = Path(args.input_file)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}")
        return 1

    try:
        with open(input_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {input_path}: {e}")
        return 1

    print(f"Validating timeline: {input_path}")
    errors, warnings, timeline = validate_document(data)

    for warning in warnings:
        print(f"  warning: {warning}")

    if args.strict:
        errors = errors + warnings
    if errors:
        print(f"\nValidation failed with {len(errors)} errors:")
        for error in errors:
            print(f"  - {error}")
        return 1

    print("\nValidation passed")
    if args.verbose and timeline is not None:
        print("\nTimeline details:")
        print(f"  Name: {timeline.name}")
        print(f"  Type: {timeline.kind.value}")
        print(f"  Total frames: {timeline.total_frames}")
        print(f"  Emitted frames: {len(timeline.frames)}")
        print(f"  Commands: {sum(len(f.commands) for f in timeline.frames)}")
        labels = [label for f in timeline.frames for label in f.labels]
        if labels:
            print(f"  Labels: {', '.join(labels)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
