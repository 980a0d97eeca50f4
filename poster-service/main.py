from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
import asyncio
import logging

from postercraft import PosterGenerator, PosterSpec, ResourceLoader, PosterRenderer
from postercraft.config import get_settings
from postercraft.errors import ExportError, PosterError
from postercraft.exporters import FileExporter, TelegramExporter
from postercraft.fonts import FontResolver
from postercraft.presets import (
    get_frame_options, get_icon_options, get_language_options,
    get_quote_box_options, get_template_options
)
from postercraft.api_models import PosterOptionsResponse, PosterShareRequest, PosterShareResponse

settings = get_settings()

# Logging setup
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Poster Service", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services; each request gets its own generator over the shared cache
resource_loader = ResourceLoader(settings)
poster_renderer = PosterRenderer(FontResolver(settings.font_dirs))
file_exporter = FileExporter(settings.output_dir)
telegram_exporter = TelegramExporter(settings=settings)


def new_generator() -> PosterGenerator:
    return PosterGenerator(settings=settings, loader=resource_loader, renderer=poster_renderer)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "poster-service"}


@app.get("/")
async def root():
    return {
        "service": "Poster Service",
        "version": "1.0.0",
        "description": "1080x1080 poster composition with text, gradients, frames and icon rows",
        "endpoints": ["/poster/options", "/poster/render", "/poster/share", "/health"],
        "telegram": telegram_exporter.is_available(),
    }


# ==================== POSTER ENDPOINTS ====================

@app.get("/poster/options", response_model=PosterOptionsResponse)
async def get_poster_options():
    """
    Get available options for poster composition.

    Returns templates, frame styles, quote box styles, languages and icons.
    """
    return PosterOptionsResponse(
        templates=get_template_options(),
        frames=get_frame_options(),
        quote_boxes=get_quote_box_options(),
        languages=get_language_options(),
        icons=get_icon_options(),
    )


@app.post("/poster/render")
async def render_poster(spec: PosterSpec):
    """
    Render a poster spec.

    Returns:
        The poster as image/png. Painted layers and the number of
        fallbacks are reported in response headers.
    """
    try:
        generator = new_generator()
        result = await generator.render(spec)
        png = await asyncio.to_thread(generator.export_png)
    except PosterError as e:
        logger.error(f"Poster render error: {e}")
        raise HTTPException(status_code=500, detail=f"Poster render failed: {e}")

    for note in result.diagnostics:
        logger.warning(f"Poster fallback: {note}")

    return Response(
        content=png,
        media_type="image/png",
        headers={
            "X-Poster-Layers": ",".join(result.layers),
            "X-Poster-Fallbacks": str(len(result.diagnostics)),
        },
    )


@app.post("/poster/share", response_model=PosterShareResponse)
async def share_poster(request: PosterShareRequest):
    """
    Render a poster and export it.

    target "telegram" sends it with the Bot API, "file" saves it to the
    configured output directory.
    """
    exporter = telegram_exporter if request.target == "telegram" else file_exporter
    if not exporter.is_available():
        raise HTTPException(status_code=503, detail=f"Exporter '{exporter.name}' is not configured")

    try:
        generator = new_generator()
        result = await generator.render(request.spec)
        exported = await generator.export(exporter, request.filename, caption=request.caption)
    except ExportError as e:
        logger.error(f"Poster export error: {e}")
        raise HTTPException(status_code=500, detail=f"Poster export failed: {e}")
    except PosterError as e:
        logger.error(f"Poster render error: {e}")
        raise HTTPException(status_code=500, detail=f"Poster render failed: {e}")

    return PosterShareResponse(
        status="success",
        exporter=exported.exporter,
        filename=exported.filename,
        size=exported.size,
        location=exported.location,
        layers=result.layers,
        diagnostics=result.diagnostics,
    )
