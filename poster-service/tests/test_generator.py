import asyncio
import threading

import httpx
import pytest
from PIL import ImageChops

from postercraft.errors import RenderNotComplete, RenderSuperseded
from postercraft.exporters import FileExporter
from postercraft.generator import PosterGenerator, RenderState
from postercraft.loader import ResourceLoader
from postercraft.models import (
    ClipartPlacement,
    CustomFonts,
    FontSizes,
    GradientConfig,
    GradientDirection,
    GradientStop,
    IconRow,
    IconRowEntry,
    PosterSpec,
)
from postercraft.presets import IconId
from postercraft.renderer import BODY_MAX_WIDTH
from postercraft.text import font_measure, wrap

from conftest import make_png, oversized_png


EMPTY_ROWS = {"social_row": IconRow(), "info_row": IconRow()}

LONG_BODY = (
    "Join us for an evening of reflection, music and shared stories "
    "with friends old and new from every corner of the city"
)


def make_generator(settings, renderer, transport=None):
    return PosterGenerator(settings, ResourceLoader(settings, transport=transport), renderer)


def bare_spec(**kwargs):
    """Spec with captions and icon rows switched off."""
    values = {"captions_enabled": False, "gradient": GradientConfig(enabled=False), **EMPTY_ROWS}
    values.update(kwargs)
    return PosterSpec(**values)


@pytest.mark.asyncio
async def test_hello_poster_layers(settings, renderer):
    generator = make_generator(settings, renderer)
    spec = PosterSpec(
        title="Hello",
        body=LONG_BODY,
        font_sizes=FontSizes(body=64),
        **EMPTY_ROWS,
    )

    result = await generator.render(spec)

    assert result.layers == ["background", "gradient.top", "gradient.bottom", "title", "body", "captions"]
    assert result.image.size == (1080, 1080)
    assert generator.state == RenderState.COMPLETE

    body_font = renderer.system_font(spec, "body", 64)
    assert len(wrap(LONG_BODY, BODY_MAX_WIDTH, font_measure(body_font))) > 1


@pytest.mark.asyncio
async def test_title_is_centered_at_title_y(settings, renderer):
    generator = make_generator(settings, renderer)

    without = (await generator.render(bare_spec())).image.copy()
    with_title = (await generator.render(bare_spec(title="Hello"))).image

    # Both renders are opaque; compare colour channels, not alpha
    left, top, right, bottom = ImageChops.difference(with_title.convert("RGB"), without.convert("RGB")).getbbox()
    assert abs((left + right) / 2 - 540) <= 8
    assert 100 <= top <= 170


@pytest.mark.asyncio
async def test_social_row_only_loads_visible_icons(settings, renderer):
    generator = make_generator(settings, renderer)
    spec = bare_spec(social_row=IconRow(entries=[
        IconRowEntry(icon=IconId.TELEGRAM, label="@a"),
        IconRowEntry(icon=IconId.INSTAGRAM, label=""),
        IconRowEntry(icon=IconId.TIKTOK, label="@c"),
    ]))

    handles = generator.resource_handles(spec)
    assert set(handles) == {"icon.telegram", "icon.tiktok"}

    result = await generator.render(spec)
    assert result.layers == ["background", "social_row"]
    assert result.diagnostics == []


@pytest.mark.asyncio
async def test_center_gradient_leaves_middle_untouched(settings, renderer):
    generator = make_generator(settings, renderer)
    gradient = GradientConfig(
        direction=GradientDirection.CENTER,
        height=300,
        stops=[
            GradientStop(color="#083765", opacity=80, position=0),
            GradientStop(color="#083765", opacity=40, position=100),
        ],
    )

    plain = (await generator.render(bare_spec())).image.copy()
    shaded = (await generator.render(bare_spec(gradient=gradient))).image

    middle = (0, 300, 1080, 780)
    assert plain.crop(middle).tobytes() == shaded.crop(middle).tobytes()
    assert plain.crop((0, 0, 1080, 300)).tobytes() != shaded.crop((0, 0, 1080, 300)).tobytes()
    assert plain.crop((0, 780, 1080, 1080)).tobytes() != shaded.crop((0, 780, 1080, 1080)).tobytes()


@pytest.mark.asyncio
async def test_broken_custom_font_falls_back(settings, renderer):
    generator = make_generator(settings, renderer)
    spec = bare_spec(title="Hello", custom_fonts=CustomFonts(title=b"not a font"))

    result = await generator.render(spec)

    assert generator.state == RenderState.COMPLETE
    assert "title" in result.layers
    assert any(d.startswith("font.title:") and "system font" in d for d in result.diagnostics)


@pytest.mark.asyncio
async def test_slow_custom_font_times_out(settings, renderer):
    async def handler(request):
        await asyncio.sleep(10)
        return httpx.Response(200)

    settings.resource_timeout = 0.05
    generator = make_generator(settings, renderer, httpx.MockTransport(handler))
    spec = bare_spec(title="Hello", custom_fonts=CustomFonts(title="https://example.com/slow.ttf"))

    result = await generator.render(spec)

    assert "title" in result.layers
    assert any("not ready" in d for d in result.diagnostics)


@pytest.mark.asyncio
async def test_failed_background_uses_template(settings, renderer):
    generator = make_generator(settings, renderer)

    plain = (await generator.render(bare_spec())).image.copy()
    result = await generator.render(bare_spec(background=b"\x00garbage"))

    assert result.layers == ["background"]
    assert result.diagnostics[0].startswith("background:")
    assert result.image.tobytes() == plain.tobytes()


@pytest.mark.asyncio
async def test_oversized_background_uses_template(settings, renderer):
    generator = make_generator(settings, renderer)

    result = await generator.render(bare_spec(background=oversized_png()))

    assert generator.state == RenderState.COMPLETE
    assert result.layers == ["background"]
    assert result.diagnostics[0].startswith("background:")
    assert result.diagnostics[0].endswith("using template gradient")


@pytest.mark.asyncio
async def test_background_image_covers_canvas(settings, renderer):
    generator = make_generator(settings, renderer)
    png = make_png((40, 30), (10, 200, 10, 255))

    result = await generator.render(bare_spec(background=png))

    assert result.image.getpixel((0, 0)) == (10, 200, 10, 255)
    assert result.image.getpixel((1079, 1079)) == (10, 200, 10, 255)


@pytest.mark.asyncio
async def test_clipart_layer(settings, renderer, png_bytes):
    generator = make_generator(settings, renderer)
    placement = ClipartPlacement(image=png_bytes, center_x=300, center_y=300, width=100, height=100)

    result = await generator.render(bare_spec(clipart=placement))

    assert result.layers[-1] == "clipart"
    assert result.image.getpixel((300, 300)) == (200, 40, 40, 255)


@pytest.mark.asyncio
async def test_failed_clipart_is_omitted(settings, renderer):
    generator = make_generator(settings, renderer)

    result = await generator.render(bare_spec(clipart=ClipartPlacement(image=b"nope")))

    assert "clipart" not in result.layers
    assert any(d.startswith("clipart:") and d.endswith("omitted") for d in result.diagnostics)


@pytest.mark.asyncio
async def test_rerender_is_deterministic(settings, renderer):
    generator = make_generator(settings, renderer)
    spec = PosterSpec(title="Hello", body="World", quote="Be kind", frame="neon")

    first = (await generator.render(spec)).image.tobytes()
    second = (await generator.render(spec)).image.tobytes()

    assert first == second


def test_surface_before_render(settings, renderer):
    generator = make_generator(settings, renderer)

    assert generator.state == RenderState.IDLE
    with pytest.raises(RenderNotComplete):
        generator.surface


@pytest.mark.asyncio
async def test_newer_render_supersedes_pending_one(settings, renderer, png_bytes):
    gate = asyncio.Event()

    async def handler(request):
        await gate.wait()
        return httpx.Response(200, content=png_bytes)

    generator = make_generator(settings, renderer, httpx.MockTransport(handler))
    stale = asyncio.ensure_future(generator.render(bare_spec(background="https://example.com/bg.png")))
    await asyncio.sleep(0)

    latest = await generator.render(bare_spec(title="Latest"))
    gate.set()

    with pytest.raises(RenderSuperseded):
        await stale
    assert generator.result is latest
    assert generator.surface is latest.image
    assert latest.generation == 2


@pytest.mark.asyncio
async def test_export_to_file(settings, renderer, tmp_path):
    generator = make_generator(settings, renderer)
    await generator.render(bare_spec(title="Saved"))

    exported = await generator.export(FileExporter(tmp_path))

    assert exported.filename == "poster-1.png"
    saved = (tmp_path / "poster-1.png").read_bytes()
    assert saved[:8] == b"\x89PNG\r\n\x1a\n"
    assert exported.size == len(saved)


@pytest.mark.asyncio
async def test_cancelled_pass_leaves_shared_load_running(settings, renderer, png_bytes):
    gate = asyncio.Event()

    async def handler(request):
        await gate.wait()
        return httpx.Response(200, content=png_bytes)

    loader = ResourceLoader(settings, transport=httpx.MockTransport(handler))
    spec = bare_spec(background="https://example.com/shared.png")
    first = asyncio.ensure_future(PosterGenerator(settings, loader, renderer).render(spec))
    second = asyncio.ensure_future(PosterGenerator(settings, loader, renderer).render(spec))
    await asyncio.sleep(0)

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first
    gate.set()
    result = await second

    assert result.diagnostics == []
    assert result.image.getpixel((540, 540)) == (200, 40, 40, 255)


@pytest.mark.asyncio
async def test_layers_paint_off_the_event_loop(settings, renderer, monkeypatch):
    threads = []
    new_surface = renderer.new_surface

    def recording_surface():
        threads.append(threading.get_ident())
        return new_surface()

    monkeypatch.setattr(renderer, "new_surface", recording_surface)
    generator = make_generator(settings, renderer)
    await generator.render(bare_spec())

    assert len(threads) == 1
    assert threads[0] != threading.get_ident()
    assert generator.export_png()[:8] == b"\x89PNG\r\n\x1a\n"
