import pytest

from postercraft.layout import RowLayoutEngine
from postercraft.models import IconRowEntry, RowMode
from postercraft.presets import IconId


def char_width(text):
    return len(text) * 10


@pytest.fixture
def engine():
    return RowLayoutEngine()


def entries(*pairs):
    return [IconRowEntry(icon=icon, label=label) for icon, label in pairs]


SOCIAL = entries(
    (IconId.TELEGRAM, "@a"),
    (IconId.INSTAGRAM, ""),
    (IconId.TIKTOK, "@c"),
)


def test_social_row_drops_blank_label(engine):
    layout = engine.layout(SOCIAL, gap=50, measure=char_width, icon_size=24)

    assert [p.icon for p in layout.placements] == [IconId.TELEGRAM, IconId.TIKTOK]
    first, second = layout.placements
    # Exactly one gap between the visible items
    assert second.x - (first.x + first.width) == 50
    assert layout.total_width == 52 + 50 + 52
    assert layout.start_x == 540 - 154 / 2


def test_blank_label_leaves_no_gap(engine):
    without = engine.layout(
        entries((IconId.TELEGRAM, "@a"), (IconId.TIKTOK, "@c")),
        gap=50, measure=char_width,
    )
    with_blank = engine.layout(SOCIAL, gap=50, measure=char_width)

    assert [(p.x, p.width) for p in with_blank.placements] == [(p.x, p.width) for p in without.placements]


@pytest.mark.parametrize("gap", [0, 10, 50, 120])
@pytest.mark.parametrize("center_x", [None, 300, 540, 800])
def test_row_is_centered(engine, gap, center_x):
    items = entries(
        (IconId.LOCATION, "Jimma University"),
        (IconId.CLOCK, "8:00"),
        (IconId.CALENDAR, "Sunday"),
    )
    layout = engine.layout(items, gap=gap, measure=char_width, center_x=center_x)
    center = 540 if center_x is None else center_x

    assert layout.start_x + layout.total_width == pytest.approx(center + layout.total_width / 2)
    last = layout.placements[-1]
    assert last.x + last.width == pytest.approx(layout.start_x + layout.total_width)


def test_item_width_includes_icon_and_margin(engine):
    layout = engine.layout(entries((IconId.CLOCK, "abc")), gap=50, measure=char_width, icon_size=24)
    (placement,) = layout.placements

    assert placement.width == 24 + 8 + 30
    assert placement.text_x == placement.x + 32


def test_only_empty_label_is_dropped(engine):
    layout = engine.layout(
        entries((IconId.CLOCK, ""), (IconId.CALENDAR, " ")),
        gap=50, measure=char_width,
    )
    assert [p.icon for p in layout.placements] == [IconId.CALENDAR]
    assert layout.total_width == 24 + 8 + 10

    assert engine.layout(entries((IconId.CLOCK, "")), gap=50, measure=char_width).is_empty


def test_row_y_is_passed_through(engine):
    layout = engine.layout(SOCIAL, gap=50, measure=char_width, y=1020)
    assert all(p.y == 1020 for p in layout.placements)


def test_stacked_mode_centers_each_item(engine):
    items = entries((IconId.LOCATION, "Main Hall"), (IconId.CLOCK, "8:00"))
    layout = engine.layout(items, gap=16, measure=char_width, icon_size=24, y=800, mode=RowMode.STACKED)

    for placement in layout.placements:
        assert placement.x + placement.width / 2 == 540
    assert [p.y for p in layout.placements] == [800, 840]
    assert layout.total_width == 24 + 8 + 90
