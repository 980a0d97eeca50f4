import pytest
from PIL import Image

from postercraft.presets import FrameStyle, QuoteBoxStyle
from postercraft.shapes import (
    FRAME_RECIPES,
    dash_segments,
    draw_frame,
    draw_quote_box,
    frame_layer,
    frame_paths,
    quote_box_layers,
    quote_box_outline,
    quote_box_rect,
)


BOX = quote_box_rect(600, 150, 750)
DRAWN_STYLES = [s for s in QuoteBoxStyle if s != QuoteBoxStyle.NONE]
FRAMED_STYLES = [s for s in FrameStyle if s != FrameStyle.NONE]


def test_quote_box_rect_centered_with_top_at_quote_y():
    assert BOX == (240, 750, 840, 900)


@pytest.mark.parametrize("style", DRAWN_STYLES)
def test_quote_box_styles_paint_fill_and_stroke(style):
    shape = quote_box_outline(style, BOX)
    fill, stroke = quote_box_layers(shape, (1080, 1080), (255, 255, 255, 40), (251, 191, 36, 255))

    assert fill.getchannel("A").getbbox() is not None
    assert stroke.getchannel("A").getbbox() is not None
    # Box center is filled, not stroked
    assert fill.getpixel((540, 825))[3] == 40
    assert stroke.getpixel((540, 825))[3] == 0


def test_quote_box_none_draws_nothing():
    canvas = Image.new("RGBA", (1080, 1080), (10, 20, 30, 255))
    before = canvas.tobytes()

    assert quote_box_outline(QuoteBoxStyle.NONE, BOX) is None
    assert draw_quote_box(canvas, QuoteBoxStyle.NONE, BOX, "rgba(255, 255, 255, 0.1)", "#fbbf24") is False
    assert canvas.tobytes() == before


def test_quote_box_circle_geometry():
    shape = quote_box_outline(QuoteBoxStyle.CIRCLE, BOX)
    assert shape.outline == (465, 750, 615, 900)


def test_quote_box_diamond_uses_edge_midpoints():
    shape = quote_box_outline(QuoteBoxStyle.DIAMOND, BOX)
    assert shape.points == ((540, 750), (840, 825), (540, 900), (240, 825))


def test_draw_quote_box_changes_canvas():
    canvas = Image.new("RGBA", (1080, 1080), (10, 20, 30, 255))
    assert draw_quote_box(canvas, QuoteBoxStyle.ROUNDED, BOX, "rgba(255, 255, 255, 0.1)", "#fbbf24")
    assert canvas.getpixel((540, 825)) != (10, 20, 30, 255)


def test_every_frame_style_has_a_recipe():
    assert set(FRAME_RECIPES) == set(FRAMED_STYLES)
    assert len(FRAME_RECIPES) == 17


@pytest.mark.parametrize("style", FRAMED_STYLES)
def test_frame_geometry_is_pure_and_inside_canvas(style):
    paths = frame_paths(style, 1080, 1080)

    assert paths
    assert paths == frame_paths(style, 1080, 1080)
    for path in paths:
        for x, y in path.points:
            assert 0 <= x <= 1080
            assert 0 <= y <= 1080


@pytest.mark.parametrize("style", FRAMED_STYLES)
def test_frame_styles_draw_strokes(style):
    canvas = Image.new("RGBA", (1080, 1080), (0, 0, 0, 255))
    assert draw_frame(canvas, style, "#fbbf24")
    assert frame_layer(style, "#fbbf24").getchannel("A").getbbox() is not None


def test_frame_none_draws_nothing():
    canvas = Image.new("RGBA", (1080, 1080), (0, 0, 0, 255))
    assert frame_paths(FrameStyle.NONE) == []
    assert draw_frame(canvas, FrameStyle.NONE, "#fbbf24") is False
    assert canvas.getchannel("R").getbbox() is None


def test_diagonal_frame_covers_two_corners():
    layer = frame_layer(FrameStyle.DIAGONAL_TL_BR, "#ffffff")

    assert layer.getpixel((20, 20))[3] == 255
    assert layer.getpixel((1059, 1059))[3] == 255
    assert layer.getpixel((1059, 20))[3] == 0
    assert layer.getpixel((20, 1059))[3] == 0


def test_half_top_left_frame():
    layer = frame_layer(FrameStyle.HALF_TOP_LEFT, "#ffffff")

    assert layer.getpixel((540, 20))[3] == 255
    assert layer.getpixel((20, 540))[3] == 255
    assert layer.getpixel((540, 1059))[3] == 0
    assert layer.getpixel((1059, 540))[3] == 0


def test_dash_segments_on_straight_line():
    segments = dash_segments([(0, 0), (90, 0)], closed=False, on=30, off=15)
    assert segments == [((0, 0), (30, 0)), ((45, 0), (75, 0))]


def test_dash_phase_continues_around_corners():
    segments = dash_segments([(0, 0), (20, 0), (20, 40)], closed=False, on=30, off=10)
    # First dash bends around the corner: 20 px on the first edge, 10 on the second
    assert segments[0] == ((0, 0), (20, 0))
    assert segments[1] == ((20, 0), (20, 10))
    assert segments[2] == ((20, 20), (20, 40))
