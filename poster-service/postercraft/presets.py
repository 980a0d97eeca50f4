"""
Fixed presets for poster composition.

Covers:
- Canvas size (always 1080x1080)
- Colour templates
- Bilingual caption texts
- Option catalogs (quote box styles, frame styles, icons, languages)
"""

import re
from enum import Enum
from typing import Dict, List, Tuple
from dataclasses import dataclass

from PIL import ImageColor


CANVAS_WIDTH = 1080
CANVAS_HEIGHT = 1080
CANVAS_SIZE = (CANVAS_WIDTH, CANVAS_HEIGHT)

RGBA = Tuple[int, int, int, int]


class Language(str, Enum):
    """Supported caption sets."""

    AMHARIC = "amharic"
    OROMIC = "oromic"


class QuoteBoxStyle(str, Enum):
    """Quote callout geometries."""

    RECTANGLE = "rectangle"
    ROUNDED = "rounded"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    NONE = "none"


class FrameStyle(str, Enum):
    """Outer decorative frame styles."""

    NONE = "none"
    SOLID = "solid"
    THICK = "thick"
    THIN = "thin"
    DASHED = "dashed"
    DOTTED = "dotted"
    DOUBLE = "double"
    ROUNDED = "rounded"
    GLOW = "glow"
    SHADOW = "shadow"
    NEON = "neon"
    CORNERS = "corners"
    TOP_BOTTOM = "top-bottom"
    LEFT_RIGHT = "left-right"
    HALF_TOP_LEFT = "half-top-left"
    HALF_BOTTOM_RIGHT = "half-bottom-right"
    DIAGONAL_TL_BR = "diagonal-tl-br"
    DIAGONAL_TR_BL = "diagonal-tr-bl"


class IconId(str, Enum):
    """Built-in icon glyphs."""

    TELEGRAM = "telegram"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    LOCATION = "location"
    CLOCK = "clock"
    CALENDAR = "calendar"


SOCIAL_ICONS = (IconId.TELEGRAM, IconId.INSTAGRAM, IconId.TIKTOK)
INFO_ICONS = (IconId.LOCATION, IconId.CLOCK, IconId.CALENDAR)


@dataclass(frozen=True)
class TemplateSpec:
    """Colour scheme of a poster template."""
    name: str
    primary: str            # Background gradient start (top)
    secondary: str          # Background gradient end (bottom)
    text_color: str         # Body text
    quote_background: str   # Quote box fill
    quote_border: str       # Quote box stroke and glow
    frame_color: str        # Default outer frame colour


TEMPLATES: Dict[int, TemplateSpec] = {
    1: TemplateSpec(
        name="Classical Blue",
        primary="#1e3a8a",
        secondary="#fbbf24",
        text_color="#ffffff",
        quote_background="rgba(251, 191, 36, 0.2)",
        quote_border="#fbbf24",
        frame_color="#fbbf24",
    ),
    2: TemplateSpec(
        name="Golden Elegance",
        primary="#92400e",
        secondary="#fbbf24",
        text_color="#ffffff",
        quote_background="rgba(255, 255, 255, 0.1)",
        quote_border="#fbbf24",
        frame_color="#fbbf24",
    ),
    3: TemplateSpec(
        name="Royal Purple",
        primary="#581c87",
        secondary="#a855f7",
        text_color="#ffffff",
        quote_background="rgba(168, 85, 247, 0.3)",
        quote_border="#a855f7",
        frame_color="#a855f7",
    ),
}

DEFAULT_TEMPLATE = 2


CAPTION_TEXTS: Dict[Language, Dict[str, str]] = {
    Language.AMHARIC: {
        "top": "በስመ አብ ወወልድ ወመንፈስ ቅዱስ አሐዱ አምላክ አሜን",
        "bottom": "የጅማ ዩንቨርስቲ ቴክኖሎጂ ኢንስቲትዩት ግቢ ጉባኤ",
    },
    Language.OROMIC: {
        "top": "Maqaa Abbaa kan ilmaa kan afuura qulqulluu waaqa tokko ameen",
        "bottom": "Yaa'ii Mooraa Inistiitiyuutii Teeknooloojii Yuunivarsiitii Jimmaa",
    },
}

CAPTION_TOP_Y = 40
CAPTION_BOTTOM_Y = 950
CAPTION_MAX_WIDTH = 1000


def get_template(template_id: int) -> TemplateSpec:
    """
    Get a colour template by id.

    Unknown ids fall back to the default template.

    Examples:
        >>> get_template(3).name
        'Royal Purple'
        >>> get_template(99).name
        'Golden Elegance'
    """
    return TEMPLATES.get(template_id, TEMPLATES[DEFAULT_TEMPLATE])


def get_caption_texts(language: Language) -> Tuple[str, str]:
    """Return (top, bottom) caption texts for a language."""
    texts = CAPTION_TEXTS[Language(language)]
    return texts["top"], texts["bottom"]


def get_template_options() -> list:
    """Get list of available templates for user selection."""
    return [
        {
            "id": template_id,
            "name": spec.name,
            "primary": spec.primary,
            "secondary": spec.secondary,
        }
        for template_id, spec in TEMPLATES.items()
    ]


def get_frame_options() -> List[str]:
    return [style.value for style in FrameStyle]


def get_quote_box_options() -> List[str]:
    return [style.value for style in QuoteBoxStyle]


def get_language_options() -> List[str]:
    return [language.value for language in Language]


def get_icon_options() -> dict:
    return {
        "social": [icon.value for icon in SOCIAL_ICONS],
        "info": [icon.value for icon in INFO_ICONS],
    }


_RGBA_PATTERN = re.compile(
    r'rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)',
    re.IGNORECASE
)


def parse_color(color: str, opacity: float = 1.0) -> RGBA:
    """
    Parse a CSS-style colour into an RGBA tuple.

    Accepts "#rgb", "#rrggbb", "#rrggbbaa", named colours and
    "rgba(r, g, b, a)" with a fractional alpha.

    Args:
        color: Colour string
        opacity: Extra opacity multiplier (0.0 - 1.0)

    Returns:
        Tuple of (r, g, b, a)

    Examples:
        >>> parse_color("#ffd700")
        (255, 215, 0, 255)
        >>> parse_color("rgba(0, 0, 0, 0.5)")
        (0, 0, 0, 128)
    """
    match = _RGBA_PATTERN.fullmatch(color.strip())
    if match:
        r, g, b = (int(match.group(i)) for i in (1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) is not None else 1.0
    else:
        rgb = ImageColor.getrgb(color)
        r, g, b = rgb[:3]
        alpha = rgb[3] / 255 if len(rgb) == 4 else 1.0

    alpha = max(0.0, min(1.0, alpha * opacity))
    return (r, g, b, int(round(alpha * 255)))
