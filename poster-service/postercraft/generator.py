"""
PosterGenerator - Main orchestrator for poster composition.

Combines:
- ResourceLoader: images, custom fonts, icon glyphs
- PosterRenderer: ordered layer painting
- Exporter: hand-off of the finished PNG

This is the main entry point of the engine.
"""

import asyncio
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image

from .config import PosterSettings, get_settings
from .errors import RenderNotComplete, RenderSuperseded
from .exporters import Exporter, ExportResult
from .fonts import FontResolver
from .loader import ResourceHandle, ResourceKind, ResourceLoader
from .models import PosterSpec
from .presets import IconId
from .renderer import TEXT_ROLES, PosterRenderer, RenderResources

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    IDLE = "idle"
    RESOURCES_LOADING = "resources_loading"
    PAINTING = "painting"
    COMPLETE = "complete"


@dataclass
class RenderResult:
    """A completed render pass."""
    image: Image.Image
    generation: int
    layers: List[str] = field(default_factory=list)         # Painted layers in order
    diagnostics: List[str] = field(default_factory=list)    # Fallbacks and omissions


class PosterGenerator:
    """
    Main orchestrator for poster composition.

    Workflow:
    1. Start a new generation (supersedes any pass still running)
    2. Load every referenced resource behind one barrier
    3. Convert failures into fallbacks
    4. Paint layers in fixed order on a fresh surface
    5. Publish the surface for export
    """

    def __init__(
        self,
        settings: Optional[PosterSettings] = None,
        loader: Optional[ResourceLoader] = None,
        renderer: Optional[PosterRenderer] = None,
    ):
        """
        Initialize generator with all components.

        Args:
            settings: Engine settings. If None, reads from environment.
            loader: Shared resource loader (keeps its session cache)
            renderer: Shared renderer
        """
        self.settings = settings or get_settings()
        self.loader = loader or ResourceLoader(self.settings)
        self.renderer = renderer or PosterRenderer(FontResolver(self.settings.font_dirs))
        self.state = RenderState.IDLE
        self.generation = 0
        self._result: Optional[RenderResult] = None

    def resource_handles(self, spec: PosterSpec) -> Dict[str, ResourceHandle]:
        """Handles for every resource a spec references, keyed by role."""
        handles: Dict[str, ResourceHandle] = {}
        if spec.background is not None:
            handles["background"] = self.loader.handle("background", ResourceKind.IMAGE, spec.background)
        if spec.clipart is not None:
            handles["clipart"] = self.loader.handle("clipart", ResourceKind.IMAGE, spec.clipart.image)

        for role in TEXT_ROLES:
            ref = getattr(spec.custom_fonts, role)
            if ref is not None:
                handles[f"font.{role}"] = self.loader.handle(f"font.{role}", ResourceKind.FONT, ref)

        for row in (spec.info_row, spec.social_row):
            for entry in self.renderer.rows.visible_items(row.entries):
                role = f"icon.{entry.icon.value}"
                if role not in handles:
                    handles[role] = self.loader.handle(role, ResourceKind.GLYPH, entry.icon.value)
        return handles

    def _resolve(self, handles: Dict[str, ResourceHandle], loaded: Dict[str, Optional[Any]]) -> RenderResources:
        resources = RenderResources()
        for role, value in loaded.items():
            if value is None:
                reason = handles[role].error or "unavailable"
                if role == "background":
                    resources.diagnostics.append(f"background: {reason}; using template gradient")
                elif role.startswith("font."):
                    resources.diagnostics.append(f"{role}: {reason}; using system font family")
                else:
                    resources.diagnostics.append(f"{role}: {reason}; omitted")
                continue

            if role == "background":
                resources.background = value
            elif role == "clipart":
                resources.clipart = value
            elif role.startswith("font."):
                resources.custom_fonts[role.split(".", 1)[1]] = value
            else:
                resources.glyphs[IconId(role.split(".", 1)[1])] = value
        return resources

    def _check_current(self, generation: int) -> None:
        if generation != self.generation:
            logger.info(f"Discarding render pass {generation}, current is {self.generation}")
            raise RenderSuperseded(generation, self.generation)

    def _paint(self, generation: int, spec: PosterSpec, resources: RenderResources) -> Tuple[Image.Image, List[str]]:
        """Paint every planned layer on a fresh surface (worker thread)."""
        with self.renderer.paint_lock:
            canvas = self.renderer.new_surface()
            painted = []
            for layer in self.renderer.plan(spec, resources):
                self._check_current(generation)
                layer.paint(canvas)
                painted.append(layer.name)
        return canvas, painted

    async def render(self, spec: PosterSpec) -> RenderResult:
        """
        Render a poster spec.

        Args:
            spec: Poster description

        Returns:
            RenderResult with the finished image

        Raises:
            RenderSuperseded: A newer render() started while this one waited
        """
        self.generation += 1
        generation = self.generation
        self.state = RenderState.RESOURCES_LOADING

        handles = self.resource_handles(spec)
        logger.info(f"Render pass {generation}: loading {len(handles)} resources")
        loaded = await self.loader.load_all(handles)
        self._check_current(generation)

        resources = self._resolve(handles, loaded)
        self.state = RenderState.PAINTING

        # Painting is CPU-bound; keep the event loop free while it runs
        canvas, painted = await asyncio.to_thread(self._paint, generation, spec, resources)
        self._check_current(generation)

        result = RenderResult(canvas, generation, painted, resources.diagnostics)
        self._result = result
        self.state = RenderState.COMPLETE

        if resources.diagnostics:
            logger.warning(f"Render pass {generation} completed with fallbacks: {resources.diagnostics}")
        logger.info(f"Render pass {generation} complete: {', '.join(painted)}")
        return result

    @property
    def surface(self) -> Image.Image:
        """The last completed surface."""
        if self._result is None:
            raise RenderNotComplete("No render pass has completed yet")
        return self._result.image

    @property
    def result(self) -> Optional[RenderResult]:
        return self._result

    def export_png(self) -> bytes:
        """PNG bytes of the last completed surface."""
        return self.renderer.encode_png(self.surface)

    async def export(self, exporter: Exporter, filename: Optional[str] = None, caption: Optional[str] = None) -> ExportResult:
        """
        Hand the finished poster to an exporter.

        Args:
            exporter: File, Telegram, ...
            filename: Output name (default poster-<generation>.png)
            caption: Optional caption for share targets

        Returns:
            ExportResult from the exporter
        """
        png = await asyncio.to_thread(self.export_png)
        name = filename or f"poster-{self._result.generation}.png"
        logger.info(f"Exporting {name} via {exporter.name}")
        return await exporter.export(png, name, caption=caption)
