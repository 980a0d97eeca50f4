"""
Shape renderer - quote box backgrounds and decorative frames.

Handles:
1. Quote box geometry (rectangle, rounded, circle, diamond)
2. Fill + stroke + glow painting of the quote box
3. The frame catalog: one FrameRecipe per style
4. Frame geometry as a pure function of canvas size
5. Dashed and dotted strokes, glow and drop shadow
"""

import math
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFilter

from .presets import CANVAS_HEIGHT, CANVAS_WIDTH, RGBA, FrameStyle, QuoteBoxStyle, parse_color

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Box = Tuple[float, float, float, float]

QUOTE_CORNER_RADIUS = 20
QUOTE_STROKE_WIDTH = 3
QUOTE_GLOW_BLUR = 10


# ---------------------------------------------------------------
# Quote box
# ---------------------------------------------------------------

@dataclass(frozen=True)
class QuoteBoxShape:
    """Resolved quote box outline."""
    style: QuoteBoxStyle
    box: Box                        # Bounding rectangle of the whole box
    outline: Box                    # Bounding rectangle of the drawn shape
    points: Tuple[Point, ...] = ()  # Diamond vertices


def quote_box_rect(width: int, height: int, quote_y: int, canvas_width: int = CANVAS_WIDTH) -> Box:
    """Box rectangle: horizontally centered, top edge at quote_y."""
    x0 = (canvas_width - width) / 2
    return (x0, quote_y, x0 + width, quote_y + height)


def quote_box_outline(style: QuoteBoxStyle, box: Box) -> Optional[QuoteBoxShape]:
    """
    Geometry of a quote box style inside its rectangle.

    Returns:
        QuoteBoxShape, or None for QuoteBoxStyle.NONE
    """
    style = QuoteBoxStyle(style)
    if style == QuoteBoxStyle.NONE:
        return None

    x0, y0, x1, y1 = box
    cx, cy = (x0 + x1) / 2, (y0 + y1) / 2

    if style == QuoteBoxStyle.CIRCLE:
        r = min(x1 - x0, y1 - y0) / 2
        return QuoteBoxShape(style, box, (cx - r, cy - r, cx + r, cy + r))

    if style == QuoteBoxStyle.DIAMOND:
        points = ((cx, y0), (x1, cy), (cx, y1), (x0, cy))
        return QuoteBoxShape(style, box, box, points)

    return QuoteBoxShape(style, box, box)


def _draw_quote_shape(draw: ImageDraw.ImageDraw, shape: QuoteBoxShape, fill=None, outline=None, width: int = 0):
    if shape.style == QuoteBoxStyle.CIRCLE:
        draw.ellipse(shape.outline, fill=fill, outline=outline, width=width)
    elif shape.style == QuoteBoxStyle.DIAMOND:
        draw.polygon(shape.points, fill=fill, outline=outline, width=width)
    elif shape.style == QuoteBoxStyle.ROUNDED:
        draw.rounded_rectangle(shape.outline, radius=QUOTE_CORNER_RADIUS, fill=fill, outline=outline, width=width)
    else:
        draw.rectangle(shape.outline, fill=fill, outline=outline, width=width)


def quote_box_layers(
    shape: QuoteBoxShape,
    size: Tuple[int, int],
    fill: RGBA,
    border: RGBA
) -> Tuple[Image.Image, Image.Image]:
    """Separate fill and stroke layers for a quote box."""
    fill_layer = Image.new("RGBA", size, (0, 0, 0, 0))
    _draw_quote_shape(ImageDraw.Draw(fill_layer), shape, fill=fill)

    stroke_layer = Image.new("RGBA", size, (0, 0, 0, 0))
    _draw_quote_shape(ImageDraw.Draw(stroke_layer), shape, outline=border, width=QUOTE_STROKE_WIDTH)
    return fill_layer, stroke_layer


def draw_quote_box(canvas: Image.Image, style: QuoteBoxStyle, box: Box, fill: str, border: str) -> bool:
    """
    Paint a quote box background onto the canvas.

    Every style except none gets a fill, a stroke and a glow of the
    stroke colour under the stroke.

    Returns:
        True if anything was drawn
    """
    shape = quote_box_outline(style, box)
    if shape is None:
        return False

    fill_layer, stroke_layer = quote_box_layers(shape, canvas.size, parse_color(fill), parse_color(border))
    canvas.alpha_composite(fill_layer)
    canvas.alpha_composite(stroke_layer.filter(ImageFilter.GaussianBlur(QUOTE_GLOW_BLUR / 2)))
    canvas.alpha_composite(stroke_layer)
    return True


# ---------------------------------------------------------------
# Frames
# ---------------------------------------------------------------

@dataclass(frozen=True)
class FrameRecipe:
    """Fixed drawing recipe of one frame style."""
    path: str                                   # Path shape, see frame_paths
    width: int = 8                              # Stroke width
    inset: int = 20                             # Distance of the stroke center from the canvas edge
    dash: Optional[Tuple[int, int]] = None      # (on, off) lengths
    dotted: bool = False
    radius: int = 0
    glow: float = 0                             # Glow blur radius
    glow_passes: int = 1
    shadow: Optional[Tuple[float, int, int]] = None  # (blur, offset_x, offset_y)
    arm: float = 0                              # Corner arm length, fraction of the side when <= 1
    second_inset: int = 0                       # Inner rectangle for double frames


FRAME_RECIPES: Dict[FrameStyle, FrameRecipe] = {
    FrameStyle.SOLID: FrameRecipe("rect", width=8, inset=20),
    FrameStyle.THICK: FrameRecipe("rect", width=20, inset=20),
    FrameStyle.THIN: FrameRecipe("rect", width=2, inset=24),
    FrameStyle.DASHED: FrameRecipe("rect", width=6, inset=20, dash=(30, 15)),
    FrameStyle.DOTTED: FrameRecipe("rect", width=8, inset=20, dash=(8, 14), dotted=True),
    FrameStyle.DOUBLE: FrameRecipe("double", width=4, inset=16, second_inset=32),
    FrameStyle.ROUNDED: FrameRecipe("rounded", width=8, inset=20, radius=40),
    FrameStyle.GLOW: FrameRecipe("rect", width=6, inset=24, glow=20),
    FrameStyle.SHADOW: FrameRecipe("rect", width=8, inset=20, shadow=(12, 6, 6)),
    FrameStyle.NEON: FrameRecipe("rounded", width=4, inset=28, radius=24, glow=16, glow_passes=3),
    FrameStyle.CORNERS: FrameRecipe("corners", width=8, inset=20, arm=120),
    FrameStyle.TOP_BOTTOM: FrameRecipe("top-bottom", width=8, inset=20),
    FrameStyle.LEFT_RIGHT: FrameRecipe("left-right", width=8, inset=20),
    FrameStyle.HALF_TOP_LEFT: FrameRecipe("half-top-left", width=8, inset=20),
    FrameStyle.HALF_BOTTOM_RIGHT: FrameRecipe("half-bottom-right", width=8, inset=20),
    FrameStyle.DIAGONAL_TL_BR: FrameRecipe("diagonal-tl-br", width=8, inset=20, arm=0.5),
    FrameStyle.DIAGONAL_TR_BL: FrameRecipe("diagonal-tr-bl", width=8, inset=20, arm=0.5),
}


@dataclass(frozen=True)
class FramePath:
    """One stroke of a frame: an open/closed polyline or a rounded rectangle."""
    points: Tuple[Point, ...]
    closed: bool = False
    radius: int = 0


def _rect_points(left: float, top: float, right: float, bottom: float) -> Tuple[Point, ...]:
    return ((left, top), (right, top), (right, bottom), (left, bottom))


def _arms(recipe: FrameRecipe, width: int, height: int) -> Tuple[float, float]:
    if recipe.arm <= 1:
        return width * recipe.arm, height * recipe.arm
    return recipe.arm, recipe.arm


def frame_paths(style: FrameStyle, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT) -> List[FramePath]:
    """
    Stroke geometry of a frame style.

    A pure function of the style and canvas size; FrameStyle.NONE has no
    paths.
    """
    style = FrameStyle(style)
    recipe = FRAME_RECIPES.get(style)
    if recipe is None:
        return []

    i = recipe.inset
    left, top, right, bottom = i, i, width - i, height - i

    if recipe.path == "rect":
        return [FramePath(_rect_points(left, top, right, bottom), closed=True)]

    if recipe.path == "rounded":
        return [FramePath(((left, top), (right, bottom)), radius=recipe.radius)]

    if recipe.path == "double":
        j = recipe.second_inset
        return [
            FramePath(_rect_points(left, top, right, bottom), closed=True),
            FramePath(_rect_points(j, j, width - j, height - j), closed=True),
        ]

    if recipe.path == "top-bottom":
        return [FramePath(((left, top), (right, top))), FramePath(((left, bottom), (right, bottom)))]

    if recipe.path == "left-right":
        return [FramePath(((left, top), (left, bottom))), FramePath(((right, top), (right, bottom)))]

    if recipe.path == "half-top-left":
        return [FramePath(((left, bottom), (left, top), (right, top)))]

    if recipe.path == "half-bottom-right":
        return [FramePath(((right, top), (right, bottom), (left, bottom)))]

    ax, ay = _arms(recipe, width, height)
    tl = FramePath(((left, top + ay), (left, top), (left + ax, top)))
    tr = FramePath(((right - ax, top), (right, top), (right, top + ay)))
    br = FramePath(((right, bottom - ay), (right, bottom), (right - ax, bottom)))
    bl = FramePath(((left + ax, bottom), (left, bottom), (left, bottom - ay)))

    if recipe.path == "corners":
        return [tl, tr, br, bl]
    if recipe.path == "diagonal-tl-br":
        return [tl, br]
    if recipe.path == "diagonal-tr-bl":
        return [tr, bl]

    raise ValueError(f"Unknown frame path: {recipe.path}")


def dash_segments(points: Sequence[Point], closed: bool, on: float, off: float) -> List[Tuple[Point, Point]]:
    """
    Split a polyline into dash segments.

    The dash phase carries across corners so the pattern runs continuously
    around the path.
    """
    vertices = list(points) + ([points[0]] if closed else [])
    segments: List[Tuple[Point, Point]] = []
    period = on + off
    phase = 0.0

    for (x0, y0), (x1, y1) in zip(vertices, vertices[1:]):
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            continue
        ux, uy = (x1 - x0) / length, (y1 - y0) / length
        pos = 0.0
        while pos < length:
            in_cycle = phase % period
            if in_cycle < on:
                step = min(on - in_cycle, length - pos)
                segments.append(((x0 + ux * pos, y0 + uy * pos), (x0 + ux * (pos + step), y0 + uy * (pos + step))))
            else:
                step = min(period - in_cycle, length - pos)
            pos += step
            phase += step
    return segments


def _stroke(draw: ImageDraw.ImageDraw, path: FramePath, recipe: FrameRecipe, color: RGBA) -> None:
    w = recipe.width

    if path.radius:
        (x0, y0), (x1, y1) = path.points
        h = w / 2
        draw.rounded_rectangle((x0 - h, y0 - h, x1 + h, y1 + h), radius=path.radius, outline=color, width=w)
        return

    if recipe.dash:
        on, off = recipe.dash
        for start, end in dash_segments(path.points, path.closed, on, off):
            if recipe.dotted:
                cx, cy = (start[0] + end[0]) / 2, (start[1] + end[1]) / 2
                r = w / 2
                draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=color)
            else:
                draw.line((start, end), fill=color, width=w)
        return

    vertices = list(path.points) + ([path.points[0]] if path.closed else [])
    draw.line(vertices, fill=color, width=w, joint="curve")
    # Square off the open ends and the closing corner
    h = w / 2
    for x, y in (vertices[0], vertices[-1]):
        draw.rectangle((x - h, y - h, x + h, y + h), fill=color)


def frame_layer(style: FrameStyle, color: str, size: Tuple[int, int] = (CANVAS_WIDTH, CANVAS_HEIGHT)) -> Optional[Image.Image]:
    """Sharp strokes of a frame on a transparent layer (None for none)."""
    style = FrameStyle(style)
    recipe = FRAME_RECIPES.get(style)
    if recipe is None:
        return None

    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    rgba = parse_color(color)
    for path in frame_paths(style, *size):
        _stroke(draw, path, recipe, rgba)
    return layer


def draw_frame(canvas: Image.Image, style: FrameStyle, color: str) -> bool:
    """
    Paint a decorative frame onto the canvas.

    Returns:
        True if anything was drawn
    """
    style = FrameStyle(style)
    layer = frame_layer(style, color, canvas.size)
    if layer is None:
        return False
    recipe = FRAME_RECIPES[style]

    if recipe.shadow:
        blur, dx, dy = recipe.shadow
        shadow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        tint = Image.new("RGBA", canvas.size, (0, 0, 0, 153))
        shadow.paste(tint, (dx, dy), layer.getchannel("A"))
        canvas.alpha_composite(shadow.filter(ImageFilter.GaussianBlur(blur / 2)))

    if recipe.glow:
        halo = layer.filter(ImageFilter.GaussianBlur(recipe.glow / 2))
        for _ in range(recipe.glow_passes):
            canvas.alpha_composite(halo)

    canvas.alpha_composite(layer)
    logger.debug(f"Drew frame {style.value}")
    return True
