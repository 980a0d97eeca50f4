"""
Font family resolution.

Maps CSS-style family lists ("Georgia, serif") to font files found on the
system, falling back to Pillow's bundled default font.
"""

import io
import os
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

FontType = ImageFont.FreeTypeFont

SYSTEM_FONT_DIRS = [
    "/usr/share/fonts",
    "/usr/local/share/fonts",
    os.path.expanduser("~/.fonts"),
    os.path.expanduser("~/.local/share/fonts"),
    "/System/Library/Fonts",
    "/Library/Fonts",
    "C:\\Windows\\Fonts",
]

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")

# family -> (regular candidates, bold candidates), file names lowercased
FAMILY_FILES: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    "georgia": (("georgia.ttf",), ("georgiab.ttf", "georgia bold.ttf")),
    "arial": (("arial.ttf", "liberationsans-regular.ttf"), ("arialbd.ttf", "arial bold.ttf", "liberationsans-bold.ttf")),
    "helvetica": (("helvetica.ttc", "liberationsans-regular.ttf"), ("helvetica.ttc", "liberationsans-bold.ttf")),
    "times new roman": (("times.ttf", "times new roman.ttf", "liberationserif-regular.ttf"), ("timesbd.ttf", "times new roman bold.ttf", "liberationserif-bold.ttf")),
    "verdana": (("verdana.ttf",), ("verdanab.ttf", "verdana bold.ttf")),
    "trebuchet ms": (("trebuc.ttf", "trebuchet ms.ttf"), ("trebucbd.ttf", "trebuchet ms bold.ttf")),
    "impact": (("impact.ttf",), ("impact.ttf",)),
    "comic sans ms": (("comic.ttf", "comic sans ms.ttf"), ("comicbd.ttf", "comic sans ms bold.ttf")),
    "courier new": (("cour.ttf", "courier new.ttf", "liberationmono-regular.ttf"), ("courbd.ttf", "courier new bold.ttf", "liberationmono-bold.ttf")),
    "palatino": (("pala.ttf", "palatino.ttc"), ("palab.ttf", "palatino.ttc")),
    "noto sans ethiopic": (("notosansethiopic-regular.ttf",), ("notosansethiopic-bold.ttf",)),
    "abyssinica sil": (("abyssinicasil-regular.ttf",), ("abyssinicasil-regular.ttf",)),
    # Generic families
    "serif": (("dejavuserif.ttf", "liberationserif-regular.ttf", "notoserif-regular.ttf"), ("dejavuserif-bold.ttf", "liberationserif-bold.ttf", "notoserif-bold.ttf")),
    "sans-serif": (("dejavusans.ttf", "liberationsans-regular.ttf", "notosans-regular.ttf"), ("dejavusans-bold.ttf", "liberationsans-bold.ttf", "notosans-bold.ttf")),
    "monospace": (("dejavusansmono.ttf", "liberationmono-regular.ttf"), ("dejavusansmono-bold.ttf", "liberationmono-bold.ttf")),
    "cursive": (("dejavusans.ttf",), ("dejavusans-bold.ttf",)),
}

ETHIOPIC_FAMILIES = ("noto sans ethiopic", "abyssinica sil")


def parse_family_list(family: str) -> List[str]:
    """
    Split a CSS-style family list.

    Examples:
        >>> parse_family_list('Georgia, "Times New Roman", serif')
        ['georgia', 'times new roman', 'serif']
    """
    names = []
    for part in family.split(","):
        name = part.strip().strip("'\"").lower()
        if name:
            names.append(name)
    return names


class FontResolver:
    """
    Resolves family names to sized Pillow fonts.

    The file index is built lazily on first use by walking the configured
    and system font directories.
    """

    def __init__(self, font_dirs: Optional[Sequence[Path]] = None):
        self.font_dirs = [Path(d) for d in (font_dirs or [])]
        self._index: Optional[Dict[str, str]] = None
        self._cache: Dict[Tuple[Optional[str], int], FontType] = {}

    def _build_index(self) -> Dict[str, str]:
        index: Dict[str, str] = {}
        search_dirs = [str(d) for d in self.font_dirs] + SYSTEM_FONT_DIRS
        for base in search_dirs:
            if not os.path.isdir(base):
                continue
            for root, _, files in os.walk(base):
                for name in files:
                    if name.lower().endswith(FONT_EXTENSIONS):
                        # First directory wins, configured dirs come first
                        index.setdefault(name.lower(), os.path.join(root, name))
        logger.debug(f"Font index built with {len(index)} files")
        return index

    @property
    def index(self) -> Dict[str, str]:
        if self._index is None:
            self._index = self._build_index()
        return self._index

    def find_file(self, family: str, bold: bool = False) -> Optional[str]:
        """Find a font file for the first available family in the list."""
        for name in parse_family_list(family):
            regular, bold_files = FAMILY_FILES.get(name, ((f"{name}.ttf",), ()))
            candidates = (bold_files + regular) if bold else regular
            for filename in candidates:
                path = self.index.get(filename)
                if path:
                    return path
        return None

    def get_font(
        self,
        family: str,
        size: int,
        bold: bool = False,
        prefer: Iterable[str] = ()
    ) -> FontType:
        """
        Get a sized font for a family list.

        Args:
            family: CSS-style family list
            size: Font size in pixels
            bold: Prefer a bold face
            prefer: Families tried before the list (e.g. script coverage)

        Returns:
            Pillow font; the bundled default font if nothing matches
        """
        preferred = ", ".join(prefer)
        path = None
        if preferred:
            path = self.find_file(preferred, bold)
        if path is None:
            path = self.find_file(family, bold)

        key = (path, size)
        if key in self._cache:
            return self._cache[key]

        font = None
        if path:
            try:
                font = ImageFont.truetype(path, size)
            except OSError as e:
                logger.warning(f"Failed to load font {path}: {e}")

        if font is None:
            logger.debug(f"No font file for '{family}', using default font")
            font = ImageFont.load_default(size)

        self._cache[key] = font
        return font


class DecodedFont:
    """A custom font resource decoded from bytes."""

    def __init__(self, data: bytes, name: str = "custom"):
        self.data = data
        self.name = name
        self._sizes: Dict[int, FontType] = {}
        # Validate eagerly so broken files fail at load time, not at paint time
        self.at(12)

    def at(self, size: int) -> FontType:
        if size not in self._sizes:
            self._sizes[size] = ImageFont.truetype(io.BytesIO(self.data), size)
        return self._sizes[size]
