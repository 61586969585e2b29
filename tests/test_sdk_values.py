# tests/test_sdk_values.py
import pytest
from pydantic import ValidationError

from animexport.timeline.sdk import (
    BLEND_MODES,
    Color,
    ColorMatrix,
    LabelType,
    Matrix2D,
    Rect,
    TimelineKind,
    blend_mode_name,
    coerce_color,
    derive_timeline_kind,
    filter_placement_name,
    filter_quality_name,
    format_color,
    format_strength,
)


def test_blend_mode_table_matches_runtime_names():
    """Codes 0-13 map onto the runtime's names, including its 'Substract' spelling."""
    assert len(BLEND_MODES) == 14
    assert blend_mode_name(0) == "Normal"
    assert blend_mode_name(3) == "Multiply"
    assert blend_mode_name(9) == "Substract"
    assert blend_mode_name(13) == "Erase"


@pytest.mark.parametrize("code", [-1, 14, 99, "3", None, 2.5, True])
def test_unknown_blend_codes_have_no_name(code):
    assert blend_mode_name(code) is None


def test_quality_and_placement_tables():
    assert [filter_quality_name(i) for i in range(3)] == ["low", "medium", "high"]
    assert [filter_placement_name(i) for i in range(3)] == ["inner", "outer", "full"]
    assert filter_quality_name(3) is None
    assert filter_placement_name(-1) is None


def test_timeline_kind_derivation():
    assert derive_timeline_kind(0, None) == TimelineKind.STAGE
    assert derive_timeline_kind(0, "ignored") == TimelineKind.STAGE
    assert derive_timeline_kind(7, None) == TimelineKind.GRAPHIC
    assert derive_timeline_kind(7, "hero_mc") == TimelineKind.MOVIECLIP
    assert derive_timeline_kind(7, "") == TimelineKind.MOVIECLIP


def test_color_inputs_coerce_to_rgba():
    assert coerce_color((1, 2, 3)) == Color(red=1, green=2, blue=3, alpha=255)
    assert coerce_color((1, 2, 3, 4)).alpha == 4
    assert coerce_color(0x102030) == Color(red=16, green=32, blue=48)
    assert coerce_color("#a0b0c0") == Color(red=160, green=176, blue=192)
    assert coerce_color("0x0000ff80") == Color(red=0, green=0, blue=255, alpha=128)
    assert coerce_color({"red": 5, "green": 6, "blue": 7, "alpha": 8}).blue == 7


@pytest.mark.parametrize("bad", ["#abc", "red", (1, 2), 0x1000000, -1, True, object()])
def test_bad_colors_are_rejected(bad):
    with pytest.raises(ValueError):
        coerce_color(bad)


def test_color_channels_are_bounded():
    with pytest.raises(ValidationError):
        Color(red=256)


def test_color_formatting_is_stable():
    assert format_color((255, 136, 0, 10)) == "#ff8800"
    assert format_color((255, 136, 0), "0x") == "0xff8800"
    # Same input, same text
    assert format_color(0xABCDEF) == format_color(0xABCDEF) == "#abcdef"


def test_color_opacity():
    assert Color(alpha=255).opacity == 1.0
    assert Color(alpha=0).opacity == 0.0


def test_strength_is_decimal_text():
    assert format_strength(1) == "1"
    assert format_strength(2.0) == "2"
    assert format_strength(-3) == "-3"
    with pytest.raises(ValueError):
        format_strength(1.5)


def test_matrix_serializes_as_six_numbers():
    m = Matrix2D.model_validate([2, 0, 0, 2, 10, 20])
    assert m.a == 2.0 and m.ty == 20.0
    assert m.model_dump() == [2.0, 0.0, 0.0, 2.0, 10.0, 20.0]
    assert Matrix2D().model_dump() == [1.0, 0.0, 0.0, 1.0, 0.0, 0.0]
    with pytest.raises(ValidationError):
        Matrix2D.model_validate([1, 2, 3])


def test_rect_and_color_matrix_serialization():
    assert Rect.model_validate([0, 0, 100, 50]).model_dump() == [0.0, 0.0, 100.0, 50.0]
    identity = ColorMatrix()
    assert len(identity.model_dump()) == 20
    assert ColorMatrix.model_validate(list(range(20))).values[19] == 19.0
    with pytest.raises(ValidationError):
        ColorMatrix.model_validate([1.0] * 19)


def test_label_type_codes():
    assert LabelType(1) is LabelType.NAME
    assert LabelType(2) is LabelType.COMMENT
    assert LabelType(3) is LabelType.ANCHOR
