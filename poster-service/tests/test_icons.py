import pytest

from postercraft.icons import GLYPH_PAINTERS, GLYPH_SIZE, draw_glyph
from postercraft.presets import IconId


def test_every_icon_has_a_painter():
    assert set(GLYPH_PAINTERS) == set(IconId)


@pytest.mark.parametrize("icon", list(IconId))
def test_glyph_is_drawn(icon):
    glyph = draw_glyph(icon)

    assert glyph.mode == "RGBA"
    assert glyph.size == (GLYPH_SIZE, GLYPH_SIZE)
    assert glyph.getchannel("A").getbbox() is not None
