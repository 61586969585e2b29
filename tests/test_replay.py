# tests/test_replay.py
import json

import pytest
import yaml

from animexport.timeline import replay, validate_timeline
from animexport.timeline.errors import DocumentError, EncodingFault
from animexport.timeline.replay import filter_handle, load_event_log, replay_document, replay_events
from animexport.timeline.sdk import TimelineKind


EVENT_LOG = {
    "name": "hero",
    "asset_id": 7,
    "instance_name": "hero_mc",
    "events": [
        {"op": "label", "label": "idle"},
        {"op": "place", "asset_id": 1, "instance_id": 10, "transform": [1, 0, 0, 1, 0, 0]},
        {"op": "place_timeline", "asset_id": 2, "instance_id": 11, "place_after": 10, "loop": True,
         "instance_name": "arm"},
        {"op": "mask", "instance_id": 10, "mask_till": 11},
        {"op": "filter", "instance_id": 10, "filter": {
            "blur": {"enabled": True, "blur_x": 4, "blur_y": 4, "quality": "low"},
            "gradient_glow": {"enabled": True, "angle": 45, "distance": 4, "knockout": False,
                              "blur_x": 2, "blur_y": 2, "quality": "high", "strength": 1,
                              "placement": "outer",
                              "gradient": [{"pos": 0, "color": "#ff0000"}, {"pos": 255, "color": [0, 0, 255, 0]}]},
        }},
        {"op": "blend_mode", "instance_id": 10, "mode": "Multiply"},
        {"op": "show_frame", "frame": 0},
        {"op": "show_frame", "frame": 1},
        {"op": "label", "label": "note", "label_type": "comment"},
        {"op": "place_sound", "asset_id": 3, "instance_id": 12,
         "sound": {"loop_mode": {"mode": 0, "repeat_count": 1}, "sync_mode": 1,
                   "sound_limit": {"in_pos44": 0, "out_pos44": 500}}},
        {"op": "show_frame", "frame": 2},
    ],
}


def test_replay_document_builds_timeline():
    timeline = replay_document(EVENT_LOG)
    assert timeline.kind == TimelineKind.MOVIECLIP
    assert timeline.asset_id == 7
    assert timeline.total_frames == 3
    assert [f.frame for f in timeline.frames] == [0, 2]
    first = timeline.frame(0)
    assert first.labels == ("idle",)
    assert [c.type for c in first.commands] == ["Place", "Place", "Filter", "BlendMode", "Mask"]
    filters = first.commands[2].to_record()["filters"]
    assert [f["filterType"] for f in filters] == ["BlurFilter", "GradientGlowFilter"]
    assert filters[1]["placement"] == "outer"
    assert filters[1]["GradientStops"][1] == {"offset": 100.0, "stopColor": "#0000ff", "stopOpacity": 0.0}
    assert first.commands[3].to_record()["blendMode"] == "Multiply"
    assert timeline.frame(2).commands[0].to_record()["syncMode"] == 1


def test_filter_handle_rejects_unknown_capability():
    with pytest.raises(DocumentError):
        filter_handle({"sparkle": {}})


@pytest.mark.parametrize(
    "events",
    [
        [{"instance_id": 1}],
        [{"op": "teleport"}],
        [{"op": "remove"}],
        [{"op": "label", "label": "x", "label_type": "bookmark"}],
    ],
)
def test_bad_events_are_document_errors(events):
    with pytest.raises(DocumentError):
        replay_events(events)


def test_encoding_fault_propagates():
    events = [{"op": "place_sound", "asset_id": 1, "instance_id": 2,
               "sound": {"loop_mode": {"mode": 0, "repeat_count": 0}, "sync_mode": 2,
                         "sound_limit": {"in_pos44": 0, "out_pos44": 0}}}]
    with pytest.raises(EncodingFault):
        replay_events(events)


def test_replay_document_requires_events():
    with pytest.raises(DocumentError):
        replay_document({"name": "x"})


def test_load_event_log_yaml_and_json(tmp_path):
    y = tmp_path / "log.yaml"
    y.write_text(yaml.safe_dump(EVENT_LOG), encoding="utf-8")
    j = tmp_path / "log.json"
    j.write_text(json.dumps(EVENT_LOG), encoding="utf-8")
    assert load_event_log(y) == EVENT_LOG
    assert load_event_log(j) == EVENT_LOG


def test_load_event_log_rejects_lists(tmp_path):
    p = tmp_path / "log.yaml"
    p.write_text("- op: show_frame\n", encoding="utf-8")
    with pytest.raises(DocumentError):
        load_event_log(p)


def test_encode_then_validate_cli(tmp_path, capsys):
    log_path = tmp_path / "hero.yaml"
    log_path.write_text(yaml.safe_dump(EVENT_LOG), encoding="utf-8")
    out = tmp_path / "build" / "hero.json"
    cfg = tmp_path / "missing.yaml"

    assert replay.main(["--in", str(log_path), "--out", str(out), "--config", str(cfg)]) == 0
    doc = json.loads(out.read_text(encoding="utf-8"))
    assert doc["type"] == "movieclip"
    assert doc["totalFrames"] == 3

    assert validate_timeline.main(["--in", str(out), "--config", str(cfg), "--strict"]) == 0
    assert "Validation passed" in capsys.readouterr().out


def test_encode_cli_color_format_override(tmp_path):
    log_path = tmp_path / "hero.json"
    log_path.write_text(json.dumps(EVENT_LOG), encoding="utf-8")
    out = tmp_path / "hero.out.json"
    assert replay.main(["--in", str(log_path), "--out", str(out), "--color-format", "0x",
                        "--config", str(tmp_path / "none.yaml")]) == 0
    doc = json.loads(out.read_text(encoding="utf-8"))
    stops = doc["frames"][0]["commands"][2]["filters"][1]["GradientStops"]
    assert stops[0]["stopColor"] == "0xff0000"


def test_encode_cli_missing_input(tmp_path, capsys):
    assert replay.main(["--in", str(tmp_path / "nope.json"), "--out", str(tmp_path / "o.json")]) == 1
    assert "not found" in capsys.readouterr().out


def test_validate_cli_reports_failures(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"type": "graphic", "name": "g", "totalFrames": 1, "frames": []}), encoding="utf-8")
    assert validate_timeline.main(["--in", str(bad), "--config", str(tmp_path / "none.yaml")]) == 1
    assert "Validation failed" in capsys.readouterr().out


@pytest.mark.parametrize("name,code", [("event", 0), ("Start", 1), ("stream", 3)])
def test_sound_sync_mode_accepts_names(name, code):
    events = [
        {"op": "place_sound", "asset_id": 3, "instance_id": 4,
         "sound": {"loop_mode": {"mode": 0, "repeat_count": 1}, "sync_mode": name,
                   "sound_limit": {"in_pos44": 0, "out_pos44": 10}}},
        {"op": "show_frame", "frame": 0},
    ]
    writer = replay_events(events)
    frame = writer.finish(0, None, "stage").frame(0)
    assert frame.commands[0].to_record()["syncMode"] == code


def test_sound_sync_mode_unknown_name():
    events = [{"op": "place_sound", "asset_id": 3, "instance_id": 4,
               "sound": {"sync_mode": "loud"}}]
    with pytest.raises(DocumentError):
        replay_events(events)
