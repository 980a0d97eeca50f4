# Poster Composition Module
# Declarative PosterSpec in, deterministic 1080x1080 PNG out

from .generator import PosterGenerator, RenderResult, RenderState
from .models import PosterSpec, GradientConfig, ZonedGradientConfig, GradientStop
from .presets import get_template, get_template_options
from .loader import ResourceLoader
from .layout import RowLayoutEngine
from .renderer import PosterRenderer
from .exporters import Exporter, FileExporter, TelegramExporter

__all__ = [
    "PosterGenerator",
    "RenderResult",
    "RenderState",
    "PosterSpec",
    "GradientConfig",
    "ZonedGradientConfig",
    "GradientStop",
    "get_template",
    "get_template_options",
    "ResourceLoader",
    "RowLayoutEngine",
    "PosterRenderer",
    "Exporter",
    "FileExporter",
    "TelegramExporter",
]
