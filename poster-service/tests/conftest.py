import io
import struct
import zlib

import pytest
from PIL import Image

from postercraft.config import PosterSettings
from postercraft.fonts import FontResolver
from postercraft.renderer import PosterRenderer


def make_png(size=(40, 30), color=(200, 40, 40, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def _chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)


def oversized_png(width=20000, height=20000) -> bytes:
    """A valid PNG header declaring far more pixels than Pillow will decode."""
    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _chunk(b"IHDR", header)
        + _chunk(b"IDAT", zlib.compress(b""))
        + _chunk(b"IEND", b"")
    )


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def settings(tmp_path):
    return PosterSettings(
        resource_timeout=0.5,
        http_timeout=5.0,
        font_dirs=[],
        icons_dir=None,
        output_dir=tmp_path / "posters",
        telegram_bot_token=None,
        telegram_chat_id=None,
    )


@pytest.fixture(scope="session")
def renderer():
    # Font index is walked once per session
    return PosterRenderer(FontResolver())
