# tests/test_timeline_writer.py
import json
import logging

import pytest

from animexport.config.schemas import EncoderConfig
from animexport.timeline.capabilities import make_handle
from animexport.timeline.errors import UNSUPPORTED_ENUM, EncodingFault, PropertyReadFault
from animexport.timeline.sdk import TimelineKind
from animexport.timeline.writer import TimelineAssembler, TimelineWriter


def test_single_frame_stage_document(writer):
    writer.place_object(1, 10, 0)
    writer.update_mask(10, 20)
    writer.update_visibility(10, True)
    writer.show_frame(0)
    timeline = writer.finish(0, None, "scene")
    assert timeline.to_document() == {
        "type": "stage",
        "name": "scene",
        "totalFrames": 1,
        "frames": [
            {
                "frame": 0,
                "commands": [
                    {"type": "Place", "assetId": 1, "instanceId": 10, "placeAfter": 0},
                    {"type": "Visibility", "instanceId": 10, "visibility": True},
                    {"type": "Mask", "instanceId": 10, "maskTill": 20},
                ],
            }
        ],
    }


@pytest.mark.parametrize(
    "asset_id,instance_name,kind",
    [
        (0, None, TimelineKind.STAGE),
        (0, "ignored", TimelineKind.STAGE),
        (7, None, TimelineKind.GRAPHIC),
        (7, "walker_mc", TimelineKind.MOVIECLIP),
        (7, "", TimelineKind.MOVIECLIP),
    ],
)
def test_timeline_kind(writer, asset_id, instance_name, kind):
    assert writer.finish(asset_id, instance_name, "t").kind == kind


def test_symbol_document_carries_asset_id(writer):
    writer.place_object(2, 1, 0)
    writer.show_frame(0)
    doc = writer.finish(7, None, "tree").to_document()
    assert doc["assetId"] == 7
    assert doc["type"] == "graphic"
    assert list(doc)[:4] == ["assetId", "type", "name", "totalFrames"]


def test_no_frames_shown_gives_empty_timeline(writer):
    timeline = writer.finish(0, None, "empty")
    assert timeline.total_frames == 0
    assert timeline.to_document()["frames"] == []


def test_finish_twice_reflects_current_state(writer):
    writer.place_object(1, 10, 0)
    writer.show_frame(0)
    first = writer.finish(3, None, "a")
    writer.remove_object(10)
    writer.show_frame(1)
    second = writer.finish(3, "a_mc", "a")
    assert first.total_frames == 1
    assert second.total_frames == 2
    assert second.kind == TimelineKind.MOVIECLIP
    assert [f.frame for f in second.frames] == [0, 1]
    assert writer.timeline is second


def test_finish_with_open_frame_logs_warning(writer, caplog):
    # the package logger does not propagate to the root handler
    logger = logging.getLogger("animexport")
    logger.addHandler(caplog.handler)
    try:
        writer.place_object(1, 10, 0)
        timeline = writer.finish(0, None, "stage")
    finally:
        logger.removeHandler(caplog.handler)
    assert timeline.frames == ()
    assert any("open frame" in r.getMessage() for r in caplog.records)


def test_utf16_host_strings_are_transcoded(writer):
    writer.set_frame_label("intro".encode("utf-16-le") + b"\x00\x00")
    writer.place_timeline_object(4, 11, 0, loop=True, instance_name="mc_é".encode("utf-16-le"))
    frame = writer.show_frame(0)
    timeline = writer.finish(5, "clip".encode("utf-16-le"), "sym".encode("utf-16-le"))
    assert frame.labels == ("intro",)
    assert frame.commands[0].instance_name == "mc_é"
    assert timeline.name == "sym"
    assert timeline.kind == TimelineKind.MOVIECLIP


def test_multi_variant_filter_is_one_command(writer, drop_shadow_props, blur_props, glow_props):
    handle = make_handle(glow=glow_props, drop_shadow=drop_shadow_props, blur=blur_props)
    writer.place_object(1, 10, 0)
    writer.add_graphic_filter(10, handle)
    frame = writer.show_frame(0)
    filters = [c for c in frame.commands if c.type == "Filter"]
    assert len(filters) == 1
    kinds = [f["filterType"] for f in filters[0].to_record()["filters"]]
    assert kinds == ["DropShadowFilter", "BlurFilter", "GlowFilter"]


def test_read_fault_leaves_frame_untouched(writer, blur_props):
    writer.place_object(1, 10, 0)
    props = dict(blur_props, blur_x=RuntimeError("host gone"))
    with pytest.raises(PropertyReadFault):
        writer.add_graphic_filter(10, make_handle(blur=props))
    assert len(writer.buffer.commands) == 1
    assert isinstance(PropertyReadFault("blur", "blur_x"), EncodingFault)


def test_unknown_blend_mode_goes_to_diagnostics(writer):
    writer.update_blend_mode(10, 77)
    assert [d.code for d in writer.diagnostics] == [UNSUPPORTED_ENUM]
    frame = writer.show_frame(0)
    assert frame.commands[0].to_record() == {"type": "BlendMode", "instanceId": 10}


def test_remove_frame_script_is_a_usage_diagnostic(writer):
    writer.remove_frame_script(2)
    assert "(Layer: 2)" in writer.diagnostics[0].message
    assert writer.show_frame(0) is None


def test_finish_writes_audit_line(tmp_path):
    audit = tmp_path / "logs" / "audit.jsonl"
    w = TimelineWriter(EncoderConfig(audit_log=str(audit)))
    w.set_frame_label("x", 2)
    w.show_frame(0)
    w.finish(9, None, "tree")
    lines = audit.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["step"] == "timeline_finish"
    assert entry["status"] == "ok"
    assert entry["asset_id"] == 9
    assert entry["type"] == "graphic"
    assert entry["total_frames"] == 1
    assert entry["emitted_frames"] == 0
    assert entry["diagnostics"] == 1


def test_assembler_counts_suppressed_frames():
    assembler = TimelineAssembler()
    assembler.commit(None)
    assembler.commit(None)
    timeline = assembler.finalize(0, "stage")
    assert timeline.total_frames == 2
    assert timeline.frames == ()
    with pytest.raises(KeyError):
        timeline.frame(0)


def test_document_is_plain_json(writer, blur_props, gradient_glow_props):
    writer.place_object(1, 10, 0)
    writer.add_graphic_filter(10, make_handle(blur=blur_props, gradient_glow=gradient_glow_props))
    writer.show_frame(0)
    doc = writer.finish(0, None, "stage").to_document()
    command = doc["frames"][0]["commands"][1]
    assert isinstance(command["filters"], list)
    assert isinstance(command["filters"][1]["GradientStops"], list)
    assert json.loads(json.dumps(doc)) == doc


def test_writer_applies_configured_log_level():
    logger = logging.getLogger("animexport")
    previous = logger.level
    try:
        TimelineWriter(EncoderConfig(log_level="debug"))
        assert logger.level == logging.DEBUG
        TimelineWriter(EncoderConfig(log_level="ERROR"))
        assert logger.level == logging.ERROR
    finally:
        logger.setLevel(previous)
