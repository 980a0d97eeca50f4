"""
Text flow - word wrap and text painting.

Paint state (fill, shadow) is passed as immutable records on every call,
so nothing carries over from one layer to the next.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFilter

from .errors import MeasurementFailure
from .gradient import evaluate_stops
from .models import GradientStop
from .presets import parse_color

logger = logging.getLogger(__name__)

Measure = Callable[[str], float]

# Fixed decorative ramp for title and quote text
GOLDEN_STOPS = (
    GradientStop(color="#ffd700", opacity=100, position=0),
    GradientStop(color="#ffed4e", opacity=100, position=30),
    GradientStop(color="#d97706", opacity=100, position=70),
    GradientStop(color="#b45309", opacity=100, position=100),
)


@dataclass(frozen=True)
class Shadow:
    """Drop shadow applied under one text block."""
    color: str
    blur: float
    offset_x: int
    offset_y: int


@dataclass(frozen=True)
class TextPaint:
    """Fill and shadow for one text block."""
    color: str = "#ffffff"
    golden: bool = False
    shadow: Optional[Shadow] = None


@dataclass(frozen=True)
class PlacedLine:
    text: str
    x: float        # Left edge
    y: float        # Top of the line box
    width: float


TITLE_SHADOW = Shadow("rgba(0, 0, 0, 0.8)", 8, 3, 3)
BODY_SHADOW = Shadow("rgba(0, 0, 0, 0.7)", 6, 2, 2)
CAPTION_SHADOW = Shadow("rgba(0, 0, 0, 0.8)", 4, 2, 2)
LABEL_SHADOW = Shadow("rgba(0, 0, 0, 0.8)", 3, 1, 1)


def font_measure(font) -> Measure:
    """Wrap a Pillow font's advance measurement."""
    def measure(text: str) -> float:
        try:
            return float(font.getlength(text))
        except (OSError, ValueError, UnicodeError) as e:
            raise MeasurementFailure(f"Cannot measure {text[:24]!r}: {e}") from e
    return measure


def wrap(text: str, max_width: float, measure: Measure) -> List[str]:
    """
    Greedy word wrap.

    Words are joined by single spaces; a word that would push the line past
    max_width starts the next line. The first word of a line always stays
    on it, so no line is empty. Newlines force a break.

    Examples:
        >>> wrap("aa bb cc", 5, len)
        ['aa bb', 'cc']
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            continue
        line = words[0]
        for word in words[1:]:
            candidate = f"{line} {word}"
            if measure(candidate) > max_width:
                lines.append(line)
                line = word
            else:
                line = candidate
        lines.append(line)
    return lines


def place_centered(
    lines: List[str],
    center_x: float,
    y: float,
    line_height: float,
    measure: Measure
) -> List[PlacedLine]:
    """Center each line on center_x, advancing line_height per line."""
    placed = []
    for i, line in enumerate(lines):
        width = measure(line)
        placed.append(PlacedLine(line, center_x - width / 2, y + i * line_height, width))
    return placed


def place_label(text: str, x: float, center_y: float, font) -> PlacedLine:
    """Left-anchored single line vertically centered on center_y."""
    _, top, _, bottom = font.getbbox(text)
    width = font_measure(font)(text)
    return PlacedLine(text, x, center_y - (top + bottom) / 2, width)


def golden_fill(size: Tuple[int, int], lines: List[PlacedLine], font_size: int) -> Image.Image:
    """
    Golden ramp over each line's glyph extent (font_size px from its top).

    Rows outside any line take the last ramp colour.
    """
    width, height = size
    rows = np.empty((height, 4), dtype=np.float32)
    rows[:] = evaluate_stops(GOLDEN_STOPS, np.ones(1, dtype=np.float32))[0]

    span = max(font_size, 1)
    for line in lines:
        y0 = max(int(line.y), 0)
        y1 = min(int(line.y) + span, height)
        if y1 <= y0:
            continue
        t = (np.arange(y0, y1, dtype=np.float32) - line.y + 0.5) / span
        rows[y0:y1] = evaluate_stops(GOLDEN_STOPS, t)

    column = np.clip(np.rint(rows), 0, 255).astype(np.uint8).reshape(height, 1, 4)
    return Image.fromarray(column, "RGBA").resize((width, height), Image.Resampling.NEAREST)


def shadow_layer(mask: Image.Image, shadow: Shadow) -> Image.Image:
    """Offset, blurred, tinted copy of a coverage mask."""
    r, g, b, a = parse_color(shadow.color)
    shifted = Image.new("L", mask.size, 0)
    shifted.paste(mask, (shadow.offset_x, shadow.offset_y))
    if shadow.blur > 0:
        # Canvas-style blur radius is roughly twice the Gaussian sigma
        shifted = shifted.filter(ImageFilter.GaussianBlur(shadow.blur / 2))
    alpha = shifted.point(lambda v: v * a // 255)
    layer = Image.new("RGBA", mask.size, (r, g, b, 0))
    layer.putalpha(alpha)
    return layer


def paint_lines(
    canvas: Image.Image,
    lines: List[PlacedLine],
    font,
    paint: TextPaint,
    font_size: int
) -> None:
    """
    Paint placed lines onto an RGBA canvas in place.

    Args:
        canvas: Poster surface
        lines: Lines with final positions
        font: Pillow font
        paint: Fill and shadow
        font_size: Used for the golden ramp extent
    """
    if not lines:
        return

    mask = Image.new("L", canvas.size, 0)
    draw = ImageDraw.Draw(mask)
    for line in lines:
        draw.text((line.x, line.y), line.text, font=font, fill=255)

    if paint.shadow is not None:
        canvas.alpha_composite(shadow_layer(mask, paint.shadow))

    if paint.golden:
        fill = golden_fill(canvas.size, lines, font_size)
    else:
        fill = Image.new("RGBA", canvas.size, parse_color(paint.color))

    fill.putalpha(ImageChops.multiply(mask, fill.getchannel("A")))
    canvas.alpha_composite(fill)


class TextFlowRenderer:
    """Paragraph and label text on the poster surface."""

    def paragraph(
        self,
        canvas: Image.Image,
        text: str,
        font,
        center_x: float,
        y: float,
        max_width: float,
        line_height: float,
        paint: TextPaint,
        font_size: int
    ) -> List[PlacedLine]:
        """Wrap and paint centered text; returns the placed lines."""
        measure = font_measure(font)
        lines = wrap(text, max_width, measure)
        placed = place_centered(lines, center_x, y, line_height, measure)
        paint_lines(canvas, placed, font, paint, font_size)
        logger.debug(f"Painted paragraph: {len(placed)} lines at y={y}")
        return placed

    def label(
        self,
        canvas: Image.Image,
        text: str,
        font,
        x: float,
        center_y: float,
        paint: TextPaint,
        font_size: int
    ) -> PlacedLine:
        """Paint one left-anchored line."""
        placed = place_label(text, x, center_y, font)
        paint_lines(canvas, [placed], font, paint, font_size)
        return placed
