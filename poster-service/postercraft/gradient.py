"""
GradientCompositor - multi-stop gradient synthesis.

Handles:
1. Stop ordering and RGBA interpolation
2. Linear gradients anchored at the top/bottom edge or the canvas middle
3. Radial gradients from the canvas center
4. "center" mode: two edge bands that leave the middle untouched
5. Zoned configs with independent top and bottom bands
6. Blend modes when compositing onto the poster
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageChops

from .models import (
    BlendMode,
    GradientConfig,
    GradientDirection,
    GradientStop,
    GradientType,
    GradientZone,
    ZonedGradientConfig,
)
from .presets import CANVAS_SIZE, parse_color

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Band = Tuple[int, int]          # Rows [start, end) the paint may touch


@dataclass(frozen=True)
class LinearGeometry:
    """Gradient axis from start along a unit vector for length px."""
    start: Point
    vector: Point
    length: float
    band: Optional[Band] = None


@dataclass(frozen=True)
class RadialGeometry:
    center: Point
    radius: float
    band: Optional[Band] = None


Geometry = Union[LinearGeometry, RadialGeometry]


@dataclass(frozen=True)
class GradientPaint:
    """A synthesized overlay ready to composite."""
    name: str
    image: Image.Image
    blend_mode: BlendMode = BlendMode.NORMAL


def sort_stops(stops: Sequence[GradientStop]) -> List[GradientStop]:
    """
    Order stops by position.

    The sort is stable: stops sharing a position keep their input order,
    and the last of them wins at that exact position.
    """
    return sorted(stops, key=lambda stop: stop.position)


def stop_table(stops: Sequence[GradientStop], intensity: float = 100) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert stops to (positions 0-1, RGBA colours) arrays.

    Intensity (0-100) scales every stop's opacity.
    """
    ordered = sort_stops(stops)
    positions = np.array([stop.position / 100 for stop in ordered], dtype=np.float32)
    colors = np.array(
        [parse_color(stop.color, (stop.opacity / 100) * (intensity / 100)) for stop in ordered],
        dtype=np.float32,
    ).reshape(-1, 4)
    return positions, colors


def evaluate_stops(stops: Sequence[GradientStop], t: np.ndarray, intensity: float = 100) -> np.ndarray:
    """
    Sample the gradient at parameters t (clamped to 0-1).

    Returns:
        Array of shape t.shape + (4,) with RGBA values 0-255
    """
    t = np.clip(np.asarray(t, dtype=np.float32), 0.0, 1.0)
    if not stops:
        return np.zeros(t.shape + (4,), dtype=np.float32)

    positions, colors = stop_table(stops, intensity)
    last = len(positions) - 1

    # Number of stops at or before t; ties resolve to the last one
    idx = np.searchsorted(positions, t, side="right")
    lo = np.clip(idx - 1, 0, last)
    hi = np.clip(idx, 0, last)

    p0 = positions[lo]
    span = positions[hi] - p0
    safe_span = np.where(span > 0, span, 1.0)
    frac = np.where(span > 0, (t - p0) / safe_span, 0.0)

    c0 = colors[lo]
    return c0 + (colors[hi] - c0) * frac[..., None]


def _unit(angle: float, flip_y: bool = False) -> Point:
    theta = math.radians(angle)
    dy = math.cos(theta)
    return (math.sin(theta), -dy if flip_y else dy)


class GradientCompositor:
    """
    Synthesizes gradient overlays for a fixed canvas size.

    Every method is a pure function of its inputs; the compositor keeps
    no per-render state.
    """

    def __init__(self, size: Tuple[int, int] = CANVAS_SIZE):
        self.size = size
        width, height = size
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
        # Sample at pixel centers
        self._xs = xs + 0.5
        self._ys = ys + 0.5

    # ---------------------------------------------------------------
    # Geometry
    # ---------------------------------------------------------------

    def linear_geometry(self, direction: GradientDirection, angle: float, height: int) -> LinearGeometry:
        """
        Axis for a single linear gradient.

        top/bottom start at that edge, both is centered on the canvas;
        the axis length is min(height, canvas height).
        """
        width, canvas_height = self.size
        length = float(min(height, canvas_height))

        if direction == GradientDirection.BOTTOM:
            return LinearGeometry((width / 2, canvas_height), _unit(angle, flip_y=True), length)

        vector = _unit(angle)
        if direction == GradientDirection.BOTH:
            start = (width / 2 - vector[0] * length / 2, canvas_height / 2 - vector[1] * length / 2)
            return LinearGeometry(start, vector, length)

        return LinearGeometry((width / 2, 0.0), vector, length)

    def center_bands(self, height: int) -> Tuple[LinearGeometry, LinearGeometry]:
        """Top and bottom edge bands of min(height, canvas height / 2) px each."""
        width, canvas_height = self.size
        band = int(min(height, canvas_height // 2))
        top = LinearGeometry((width / 2, 0.0), (0.0, 1.0), band, band=(0, band))
        bottom = LinearGeometry(
            (width / 2, float(canvas_height)), (0.0, -1.0), band,
            band=(canvas_height - band, canvas_height),
        )
        return top, bottom

    def radial_geometry(self, height: int) -> RadialGeometry:
        width, canvas_height = self.size
        radius = float(min(height, min(width, canvas_height) / 2))
        return RadialGeometry((width / 2, canvas_height / 2), radius)

    def zone_geometry(self, zone: GradientZone, edge: str) -> Geometry:
        """Geometry of one band of a zoned gradient, position 0 at the edge."""
        width, canvas_height = self.size
        band_height = int(min(zone.height, canvas_height))
        if edge == "top":
            band = (0, band_height)
        else:
            band = (canvas_height - band_height, canvas_height)

        if zone.type == GradientType.RADIAL:
            cx = width * zone.center_x / 100
            offset = band_height * zone.center_y / 100
            cy = offset if edge == "top" else canvas_height - offset
            return RadialGeometry((cx, cy), float(band_height), band=band)

        if edge == "top":
            return LinearGeometry((width / 2, 0.0), _unit(zone.angle), band_height, band=band)
        return LinearGeometry(
            (width / 2, float(canvas_height)), _unit(zone.angle, flip_y=True), band_height, band=band
        )

    # ---------------------------------------------------------------
    # Synthesis
    # ---------------------------------------------------------------

    def _parameter(self, geometry: Geometry) -> Optional[np.ndarray]:
        if isinstance(geometry, RadialGeometry):
            if geometry.radius <= 0:
                return None
            cx, cy = geometry.center
            dist = np.hypot(self._xs - cx, self._ys - cy)
            return dist / geometry.radius

        if geometry.length <= 0:
            return None
        sx, sy = geometry.start
        dx, dy = geometry.vector
        return ((self._xs - sx) * dx + (self._ys - sy) * dy) / geometry.length

    def synthesize(
        self,
        stops: Sequence[GradientStop],
        geometry: Geometry,
        intensity: float = 100
    ) -> Image.Image:
        """
        Render stops along a geometry into an RGBA layer.

        Args:
            stops: Gradient stops in any order
            geometry: Linear or radial geometry
            intensity: Opacity multiplier (0-100)

        Returns:
            Canvas-sized RGBA image, transparent outside the geometry's band
        """
        width, height = self.size
        t = self._parameter(geometry)
        if t is None or not stops:
            return Image.new("RGBA", self.size, (0, 0, 0, 0))

        pixels = evaluate_stops(stops, t, intensity)
        if geometry.band is not None:
            y0, y1 = geometry.band
            pixels[:max(y0, 0)] = 0
            pixels[min(y1, height):] = 0

        data = np.clip(np.rint(pixels), 0, 255).astype(np.uint8)
        return Image.fromarray(data, "RGBA")

    def paints(self, config: Union[GradientConfig, ZonedGradientConfig]) -> List[GradientPaint]:
        """
        Build the overlay paints for a gradient config, in paint order.

        A disabled config yields no paints; "center" yields two bands.
        """
        if not config.enabled:
            return []

        if isinstance(config, ZonedGradientConfig):
            result = []
            for edge, zone in (("top", config.top), ("bottom", config.bottom)):
                if not zone.enabled:
                    continue
                geometry = self.zone_geometry(zone, edge)
                result.append(GradientPaint(f"gradient.{edge}", self.synthesize(zone.stops, geometry)))
            return result

        if config.type == GradientType.RADIAL:
            geometry = self.radial_geometry(config.height)
            image = self.synthesize(config.stops, geometry, config.intensity)
            return [GradientPaint("gradient", image, config.blend_mode)]

        if config.direction == GradientDirection.CENTER:
            top, bottom = self.center_bands(config.height)
            return [
                GradientPaint("gradient.top", self.synthesize(config.stops, top, config.intensity), config.blend_mode),
                GradientPaint("gradient.bottom", self.synthesize(config.stops, bottom, config.intensity), config.blend_mode),
            ]

        geometry = self.linear_geometry(config.direction, config.angle, config.height)
        image = self.synthesize(config.stops, geometry, config.intensity)
        return [GradientPaint("gradient", image, config.blend_mode)]


_BLEND_OPS = {
    BlendMode.MULTIPLY: ImageChops.multiply,
    BlendMode.SCREEN: ImageChops.screen,
    BlendMode.OVERLAY: ImageChops.overlay,
    BlendMode.SOFT_LIGHT: ImageChops.soft_light,
    BlendMode.DARKEN: ImageChops.darker,
    BlendMode.LIGHTEN: ImageChops.lighter,
}


def composite_paint(canvas: Image.Image, paint: GradientPaint) -> None:
    """Composite a gradient paint onto an RGBA canvas in place."""
    op = _BLEND_OPS.get(paint.blend_mode)
    if op is None:
        canvas.alpha_composite(paint.image)
        return

    base = canvas.convert("RGB")
    blended = op(base, paint.image.convert("RGB"))
    mixed = Image.composite(blended, base, paint.image.getchannel("A"))
    mixed.putalpha(canvas.getchannel("A"))
    canvas.paste(mixed)
