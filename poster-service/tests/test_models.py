import pytest
from pydantic import ValidationError

from postercraft.models import (
    FillKind,
    FillSpec,
    GradientConfig,
    GradientStop,
    IconRow,
    PosterSpec,
    ZonedGradientConfig,
)
from postercraft.presets import (
    FrameStyle,
    Language,
    get_caption_texts,
    get_frame_options,
    get_template,
    parse_color,
)


def test_stop_opacity_and_position_are_clamped():
    stop = GradientStop(color="#ABC", opacity=150, position=-5)
    assert stop.opacity == 100
    assert stop.position == 0
    assert stop.color == "#abc"


def test_stop_rejects_non_hex_color():
    with pytest.raises(ValidationError):
        GradientStop(color="red")


def test_gradient_mode_discriminator():
    spec = PosterSpec.model_validate({"gradient": {"mode": "zoned", "top": {"height": 120}}})
    assert isinstance(spec.gradient, ZonedGradientConfig)
    assert spec.gradient.top.height == 120

    spec = PosterSpec.model_validate({"gradient": {"mode": "unified", "direction": "top"}})
    assert isinstance(spec.gradient, GradientConfig)


def test_poster_spec_is_frozen():
    spec = PosterSpec(title="Hello")
    with pytest.raises(ValidationError):
        spec.title = "Changed"


def test_poster_spec_defaults():
    spec = PosterSpec()
    assert spec.positions.title_y == 120
    assert spec.fills.title.kind == FillKind.GOLDEN
    assert spec.frame == FrameStyle.NONE
    assert [e.label for e in spec.social_row.entries] == ["@username"] * 3
    assert spec.social_row.y == 1020
    assert spec.info_row.y == 880


def test_poster_spec_from_json():
    spec = PosterSpec.model_validate_json(
        '{"title": "Hello", "frame": "diagonal-tl-br", "quote_box": {"style": "diamond"},'
        ' "language": "oromic", "background": "https://example.com/bg.png"}'
    )
    assert spec.frame == FrameStyle.DIAGONAL_TL_BR
    assert spec.language == Language.OROMIC
    assert spec.background == "https://example.com/bg.png"


def test_unknown_template_falls_back():
    assert get_template(42) == get_template(2)
    assert get_template(1).primary == "#1e3a8a"


def test_caption_texts():
    top, bottom = get_caption_texts(Language.OROMIC)
    assert top.startswith("Maqaa Abbaa")
    assert "Jimmaa" in bottom


def test_frame_options_cover_catalog():
    options = get_frame_options()
    assert options[0] == "none"
    assert len(options) == 18


def test_parse_color_forms():
    assert parse_color("#fff") == (255, 255, 255, 255)
    assert parse_color("rgba(251, 191, 36, 0.2)") == (251, 191, 36, 51)
    assert parse_color("#083765", 0.5) == (8, 55, 101, 128)


@pytest.mark.parametrize("build", [
    lambda: FillSpec(color="notacolor"),
    lambda: IconRow(color="blurple"),
    lambda: PosterSpec(frame_color="notacolor"),
])
def test_paint_colors_are_validated(build):
    with pytest.raises(ValidationError):
        build()


def test_paint_colors_accept_css_forms():
    assert FillSpec(color=" #ffd700 ").color == "#ffd700"
    assert IconRow(color="rgba(255, 215, 0, 0.5)").color == "rgba(255, 215, 0, 0.5)"
    assert PosterSpec(frame_color="white").frame_color == "white"
    assert PosterSpec().frame_color is None
