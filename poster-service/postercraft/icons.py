"""
Built-in icon glyphs.

Each glyph is drawn once at GLYPH_SIZE on a transparent square and scaled
down by the row painter. PNG files in ``settings.icons_dir`` named
``<icon_id>.png`` replace the drawings.
"""

from typing import Callable, Dict

from PIL import Image, ImageDraw

from .presets import IconId

GLYPH_SIZE = 96


def _canvas():
    image = Image.new("RGBA", (GLYPH_SIZE, GLYPH_SIZE), (0, 0, 0, 0))
    return image, ImageDraw.Draw(image)


def _telegram() -> Image.Image:
    image, draw = _canvas()
    s = GLYPH_SIZE
    draw.ellipse([0, 0, s - 1, s - 1], fill="#0088cc")
    # Paper plane
    draw.polygon(
        [(s * 0.20, s * 0.48), (s * 0.78, s * 0.26), (s * 0.68, s * 0.76), (s * 0.47, s * 0.62)],
        fill="#ffffff",
    )
    draw.polygon(
        [(s * 0.47, s * 0.62), (s * 0.42, s * 0.78), (s * 0.40, s * 0.58)],
        fill="#c8daea",
    )
    return image


def _instagram() -> Image.Image:
    image, draw = _canvas()
    s = GLYPH_SIZE
    draw.rounded_rectangle([0, 0, s - 1, s - 1], radius=s * 0.28, fill="#E4405F")
    line = max(2, s // 12)
    draw.rounded_rectangle(
        [s * 0.18, s * 0.18, s * 0.82, s * 0.82], radius=s * 0.18, outline="#ffffff", width=line
    )
    draw.ellipse([s * 0.34, s * 0.34, s * 0.66, s * 0.66], outline="#ffffff", width=line)
    draw.ellipse([s * 0.66, s * 0.25, s * 0.74, s * 0.33], fill="#ffffff")
    return image


def _tiktok() -> Image.Image:
    image, draw = _canvas()
    s = GLYPH_SIZE
    draw.ellipse([0, 0, s - 1, s - 1], fill="#111111")

    def note(dx, color):
        stem = max(3, s // 10)
        draw.rectangle([s * 0.50 + dx, s * 0.20 + dx, s * 0.50 + stem + dx, s * 0.66 + dx], fill=color)
        draw.ellipse([s * 0.28 + dx, s * 0.52 + dx, s * 0.56 + dx, s * 0.78 + dx], fill=color)
        draw.pieslice([s * 0.50 + dx, s * 0.10 + dx, s * 0.78 + dx, s * 0.40 + dx], 90, 180, fill=color)

    note(-2, "#25f4ee")
    note(2, "#ff0050")
    note(0, "#ffffff")
    return image


def _location() -> Image.Image:
    image, draw = _canvas()
    s = GLYPH_SIZE
    draw.ellipse([s * 0.20, s * 0.05, s * 0.80, s * 0.65], fill="#e53935")
    draw.polygon([(s * 0.24, s * 0.45), (s * 0.76, s * 0.45), (s * 0.50, s * 0.95)], fill="#e53935")
    draw.ellipse([s * 0.38, s * 0.23, s * 0.62, s * 0.47], fill="#ffffff")
    return image


def _clock() -> Image.Image:
    image, draw = _canvas()
    s = GLYPH_SIZE
    line = max(2, s // 14)
    draw.ellipse([2, 2, s - 3, s - 3], fill="#ffffff", outline="#1f2937", width=line)
    center = s / 2
    draw.line([(center, center), (center, s * 0.22)], fill="#1f2937", width=line)
    draw.line([(center, center), (s * 0.70, s * 0.60)], fill="#1f2937", width=line)
    return image


def _calendar() -> Image.Image:
    image, draw = _canvas()
    s = GLYPH_SIZE
    draw.rounded_rectangle([s * 0.08, s * 0.14, s * 0.92, s * 0.92], radius=s * 0.08, fill="#ffffff")
    draw.rounded_rectangle([s * 0.08, s * 0.14, s * 0.92, s * 0.36], radius=s * 0.08, fill="#e53935")
    for col in range(3):
        for row in range(2):
            x = s * (0.22 + col * 0.22)
            y = s * (0.48 + row * 0.20)
            draw.rectangle([x, y, x + s * 0.12, y + s * 0.10], fill="#1f2937")
    return image


GLYPH_PAINTERS: Dict[IconId, Callable[[], Image.Image]] = {
    IconId.TELEGRAM: _telegram,
    IconId.INSTAGRAM: _instagram,
    IconId.TIKTOK: _tiktok,
    IconId.LOCATION: _location,
    IconId.CLOCK: _clock,
    IconId.CALENDAR: _calendar,
}


def draw_glyph(icon: IconId) -> Image.Image:
    """Draw a built-in glyph."""
    return GLYPH_PAINTERS[IconId(icon)]()
