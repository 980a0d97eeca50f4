"""
PosterRenderer - Pillow-based layer painting.

Handles:
1. Background (cover-fitted image with crop transform, or template gradient)
2. Gradient overlays
3. Title, body and quote text blocks
4. Quote box and bilingual captions
5. Icon rows
6. Clipart and outer frame
7. PNG encoding of the final image

The renderer never awaits: every resource it paints has already been
resolved by the orchestrator.
"""

import io
import threading
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image

from .errors import MeasurementFailure
from .fonts import ETHIOPIC_FAMILIES, DecodedFont, FontResolver
from .gradient import GradientCompositor, LinearGeometry, composite_paint
from .layout import RowLayoutEngine
from .models import FillKind, FillSpec, GradientStop, IconRow, ImageCrop, PosterSpec
from .presets import (
    CANVAS_SIZE,
    CAPTION_BOTTOM_Y,
    CAPTION_MAX_WIDTH,
    CAPTION_TOP_Y,
    FrameStyle,
    IconId,
    Language,
    QuoteBoxStyle,
    TemplateSpec,
    get_caption_texts,
    get_template,
)
from .shapes import draw_frame, draw_quote_box, quote_box_rect
from .text import (
    BODY_SHADOW,
    CAPTION_SHADOW,
    LABEL_SHADOW,
    TITLE_SHADOW,
    Shadow,
    TextFlowRenderer,
    TextPaint,
    font_measure,
)

logger = logging.getLogger(__name__)

TEXT_ROLES = ("title", "body", "quote", "caption")

TITLE_MAX_WIDTH = 800
BODY_MAX_WIDTH = 700
QUOTE_TEXT_PADDING = 40     # Horizontal room inside the quote box
QUOTE_TEXT_OFFSET = 50      # Quote text starts this far below the box top


@dataclass
class RenderResources:
    """Resolved resources of one render pass; failed ones are absent."""
    background: Optional[Image.Image] = None
    clipart: Optional[Image.Image] = None
    custom_fonts: Dict[str, DecodedFont] = field(default_factory=dict)
    glyphs: Dict[IconId, Image.Image] = field(default_factory=dict)
    diagnostics: List[str] = field(default_factory=list)


@dataclass
class Layer:
    """One ordered paint step."""
    name: str
    paint: Callable[[Image.Image], None]


class PosterRenderer:
    """
    Paints PosterSpec layers with Pillow.

    plan() is pure: it decides which layers a spec needs, in z-order, and
    returns them as callables over a canvas.
    """

    def __init__(self, font_resolver: Optional[FontResolver] = None, size: Tuple[int, int] = CANVAS_SIZE):
        """
        Initialize renderer.

        Args:
            font_resolver: System font lookup. Created with defaults if None.
            size: Canvas size
        """
        self.size = size
        self.fonts = font_resolver or FontResolver()
        self.compositor = GradientCompositor(size)
        self.text = TextFlowRenderer()
        self.rows = RowLayoutEngine(canvas_width=size[0])
        # Font objects and caches are shared; one pass paints at a time
        self.paint_lock = threading.Lock()

    # ---------------------------------------------------------------
    # Fonts and paints
    # ---------------------------------------------------------------

    def system_font(self, spec: PosterSpec, role: str, size: int, bold: bool = False):
        """The configured system family of a role."""
        prefer = ()
        if role == "caption" and spec.language == Language.AMHARIC:
            prefer = ETHIOPIC_FAMILIES
        return self.fonts.get_font(getattr(spec.fonts, role), size, bold=bold, prefer=prefer)

    def font_for(self, spec: PosterSpec, resources: RenderResources, role: str, size: int, bold: bool = False):
        """Custom font for a role if it loaded, else its system family."""
        custom = resources.custom_fonts.get(role)
        if custom is not None:
            return custom.at(size)
        return self.system_font(spec, role, size, bold)

    @staticmethod
    def text_paint(fill: FillSpec, default_color: str, shadow: Optional[Shadow]) -> TextPaint:
        if fill.kind == FillKind.GOLDEN:
            return TextPaint(golden=True, shadow=shadow)
        return TextPaint(color=fill.color or default_color, shadow=shadow)

    # ---------------------------------------------------------------
    # Background
    # ---------------------------------------------------------------

    def template_background(self, template: TemplateSpec) -> Image.Image:
        """Vertical primary -> secondary gradient over the whole canvas."""
        width, height = self.size
        stops = [
            GradientStop(color=template.primary, opacity=100, position=0),
            GradientStop(color=template.secondary, opacity=100, position=100),
        ]
        geometry = LinearGeometry((width / 2, 0.0), (0.0, 1.0), float(height))
        return self.compositor.synthesize(stops, geometry)

    def create_background(
        self,
        template: TemplateSpec,
        image: Optional[Image.Image] = None,
        crop: ImageCrop = ImageCrop()
    ) -> Image.Image:
        """
        Create the background layer.

        The image is scaled to cover the canvas, then the crop scale and
        offset are applied around the centered position. Uncovered areas
        show the template gradient.
        """
        canvas = self.template_background(template)
        if image is None:
            return canvas

        width, height = self.size
        scale = max(width / image.width, height / image.height) * crop.scale
        target = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
        scaled = image.resize(target, Image.Resampling.LANCZOS)

        x = round((width - target[0]) / 2 + crop.offset_x)
        y = round((height - target[1]) / 2 + crop.offset_y)
        self._place(canvas, scaled, x, y)
        return canvas

    def _place(self, canvas: Image.Image, image: Image.Image, x: int, y: int) -> None:
        # Paste onto a full-size layer so negative offsets clip cleanly
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        layer.paste(image, (x, y))
        canvas.alpha_composite(layer)

    # ---------------------------------------------------------------
    # Text blocks
    # ---------------------------------------------------------------

    def paint_paragraph(
        self,
        canvas: Image.Image,
        spec: PosterSpec,
        resources: RenderResources,
        role: str,
        text: str,
        y: float,
        max_width: float,
        line_height_ratio: float,
        paint: TextPaint,
        bold: bool = False,
        layer: Optional[str] = None
    ) -> bool:
        """
        Wrap and paint a centered text block.

        A measurement failure retries once with the role's system family;
        if that fails too the block is skipped and recorded.

        Returns:
            True if the block was painted
        """
        size = getattr(spec.font_sizes, role)
        font = self.font_for(spec, resources, role, size, bold)
        center_x = self.size[0] / 2
        line_height = size * line_height_ratio
        name = layer or role

        try:
            self.text.paragraph(canvas, text, font, center_x, y, max_width, line_height, paint, size)
            return True
        except MeasurementFailure as e:
            fallback = self.system_font(spec, role, size, bold)
            if fallback is font:
                logger.warning(f"Skipping {name}: {e}")
                resources.diagnostics.append(f"{name}: skipped ({e})")
                return False
            logger.warning(f"Measurement failed for {name}, retrying with system font: {e}")

        try:
            self.text.paragraph(canvas, text, fallback, center_x, y, max_width, line_height, paint, size)
        except MeasurementFailure as e:
            logger.warning(f"Skipping {name}: {e}")
            resources.diagnostics.append(f"{name}: skipped ({e})")
            return False
        resources.diagnostics.append(f"{name}: painted with system font after measurement failure")
        return True

    def paint_title(self, canvas: Image.Image, spec: PosterSpec, resources: RenderResources) -> None:
        paint = self.text_paint(spec.fills.title, get_template(spec.template).text_color, TITLE_SHADOW)
        self.paint_paragraph(
            canvas, spec, resources, "title", spec.title,
            spec.positions.title_y, TITLE_MAX_WIDTH, 1.2, paint, bold=True,
        )

    def paint_body(self, canvas: Image.Image, spec: PosterSpec, resources: RenderResources) -> None:
        paint = self.text_paint(spec.fills.body, get_template(spec.template).text_color, BODY_SHADOW)
        self.paint_paragraph(
            canvas, spec, resources, "body", spec.body,
            spec.positions.text_y, BODY_MAX_WIDTH, 1.5, paint,
        )

    def paint_quote(self, canvas: Image.Image, spec: PosterSpec, resources: RenderResources) -> None:
        """Quote box background, then the quote text inside it."""
        template = get_template(spec.template)
        box = spec.quote_box
        rect = quote_box_rect(box.width, box.height, spec.positions.quote_y, self.size[0])
        draw_quote_box(canvas, box.style, rect, template.quote_background, template.quote_border)

        text = spec.quote if box.style == QuoteBoxStyle.NONE else f'"{spec.quote}"'
        paint = self.text_paint(spec.fills.quote, template.text_color, TITLE_SHADOW)
        self.paint_paragraph(
            canvas, spec, resources, "quote", text,
            rect[1] + QUOTE_TEXT_OFFSET, box.width - QUOTE_TEXT_PADDING, 1.4, paint,
        )

    def paint_captions(self, canvas: Image.Image, spec: PosterSpec, resources: RenderResources) -> None:
        top, bottom = get_caption_texts(spec.language)
        paint = self.text_paint(spec.fills.caption, "#ffd700", CAPTION_SHADOW)
        for name, text, y in (("captions.top", top, CAPTION_TOP_Y), ("captions.bottom", bottom, CAPTION_BOTTOM_Y)):
            self.paint_paragraph(
                canvas, spec, resources, "caption", text,
                y, CAPTION_MAX_WIDTH, 1.2, paint, layer=name,
            )

    # ---------------------------------------------------------------
    # Icon rows
    # ---------------------------------------------------------------

    def paint_row(
        self,
        canvas: Image.Image,
        spec: PosterSpec,
        resources: RenderResources,
        row: IconRow,
        name: str
    ) -> None:
        """
        Lay out and paint an icon row.

        Labels use the body family. A missing glyph omits only that icon;
        the label keeps its place.
        """
        font = self.font_for(spec, resources, "body", row.font_size)
        try:
            layout = self.rows.layout(
                row.entries, row.gap, font_measure(font),
                icon_size=row.icon_size, center_x=row.center_x, y=row.y, mode=row.mode,
            )
        except MeasurementFailure as e:
            font = self.system_font(spec, "body", row.font_size)
            logger.warning(f"Measurement failed for {name}, retrying with system font: {e}")
            try:
                layout = self.rows.layout(
                    row.entries, row.gap, font_measure(font),
                    icon_size=row.icon_size, center_x=row.center_x, y=row.y, mode=row.mode,
                )
            except MeasurementFailure as e:
                logger.warning(f"Skipping {name}: {e}")
                resources.diagnostics.append(f"{name}: skipped ({e})")
                return

        paint = TextPaint(color=row.color, shadow=LABEL_SHADOW)
        for placement in layout.placements:
            glyph = resources.glyphs.get(placement.icon)
            if glyph is not None:
                icon = glyph.resize((row.icon_size, row.icon_size), Image.Resampling.LANCZOS)
                self._place(canvas, icon, round(placement.x), round(placement.y - row.icon_size / 2))
            self.text.label(canvas, placement.label, font, placement.text_x, placement.y, paint, row.font_size)

    # ---------------------------------------------------------------
    # Clipart and frame
    # ---------------------------------------------------------------

    def paint_clipart(self, canvas: Image.Image, spec: PosterSpec, resources: RenderResources) -> None:
        clipart = spec.clipart
        image = resources.clipart.resize((clipart.width, clipart.height), Image.Resampling.LANCZOS)
        x = round(clipart.center_x - clipart.width / 2)
        y = round(clipart.center_y - clipart.height / 2)
        self._place(canvas, image, x, y)

    def paint_frame(self, canvas: Image.Image, spec: PosterSpec) -> None:
        color = spec.frame_color or get_template(spec.template).frame_color
        draw_frame(canvas, spec.frame, color)

    # ---------------------------------------------------------------
    # Layer plan
    # ---------------------------------------------------------------

    def plan(self, spec: PosterSpec, resources: RenderResources) -> List[Layer]:
        """
        Layers a spec needs, in paint order.

        background -> gradient(s) -> title -> body -> quote -> captions ->
        info row -> social row -> clipart -> frame
        """
        template = get_template(spec.template)
        layers = [Layer("background", lambda canvas: canvas.alpha_composite(
            self.create_background(template, resources.background, spec.crop)
        ))]

        for paint in self.compositor.paints(spec.gradient):
            layers.append(Layer(paint.name, lambda canvas, paint=paint: composite_paint(canvas, paint)))

        if spec.title.strip():
            layers.append(Layer("title", lambda canvas: self.paint_title(canvas, spec, resources)))
        if spec.body.strip():
            layers.append(Layer("body", lambda canvas: self.paint_body(canvas, spec, resources)))
        if spec.quote.strip():
            layers.append(Layer("quote", lambda canvas: self.paint_quote(canvas, spec, resources)))
        if spec.captions_enabled:
            layers.append(Layer("captions", lambda canvas: self.paint_captions(canvas, spec, resources)))

        for name, row in (("info_row", spec.info_row), ("social_row", spec.social_row)):
            if self.rows.visible_items(row.entries):
                layers.append(Layer(name, lambda canvas, row=row, name=name: self.paint_row(
                    canvas, spec, resources, row, name
                )))

        if spec.clipart is not None and resources.clipart is not None:
            layers.append(Layer("clipart", lambda canvas: self.paint_clipart(canvas, spec, resources)))
        if spec.frame != FrameStyle.NONE:
            layers.append(Layer("frame", lambda canvas: self.paint_frame(canvas, spec)))
        return layers

    def new_surface(self) -> Image.Image:
        return Image.new("RGBA", self.size, (0, 0, 0, 0))

    def encode_png(self, image: Image.Image) -> bytes:
        """PNG bytes of a finished poster."""
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
