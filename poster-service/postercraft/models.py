"""
Input models for poster composition.

A PosterSpec is built fresh by the caller on every change and is never
mutated by the engine.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .presets import (
    CANVAS_WIDTH,
    FrameStyle,
    IconId,
    Language,
    QuoteBoxStyle,
    parse_color,
)


# Bytes are accepted for in-process callers; JSON callers use URLs or data URLs
ResourceRef = Union[str, bytes]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _check_paint_color(value: Optional[str]) -> Optional[str]:
    """Reject colours the painters could not parse."""
    if value is None:
        return value
    parse_color(value)
    return value.strip()


# ============== Gradient models ==============

class GradientType(str, Enum):
    LINEAR = "linear"
    RADIAL = "radial"


class GradientDirection(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    BOTH = "both"
    CENTER = "center"


class BlendMode(str, Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    SOFT_LIGHT = "soft-light"
    DARKEN = "darken"
    LIGHTEN = "lighten"


class GradientStop(_Frozen):
    """One (color, opacity, position) point of a gradient."""
    color: str = "#083765"
    opacity: float = 80       # 0-100
    position: float = 0       # 0-100

    @field_validator("color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("#") or len(value) not in (4, 7):
            raise ValueError(f"Expected #rgb or #rrggbb, got {value!r}")
        parse_color(value)
        return value.lower()

    @field_validator("opacity", "position")
    @classmethod
    def _clamp_percent(cls, value: float) -> float:
        return max(0.0, min(100.0, value))


def _default_stops() -> List[GradientStop]:
    return [
        GradientStop(color="#083765", opacity=80, position=0),
        GradientStop(color="#083765", opacity=0, position=100),
    ]


class GradientConfig(_Frozen):
    """Single gradient overlay."""
    mode: Literal["unified"] = "unified"
    enabled: bool = True
    type: GradientType = GradientType.LINEAR
    direction: GradientDirection = GradientDirection.CENTER
    angle: float = 0                    # Degrees, 0 points into the canvas
    height: int = Field(default=400, ge=0)
    intensity: float = Field(default=100, ge=0, le=100)
    blend_mode: BlendMode = BlendMode.NORMAL
    stops: List[GradientStop] = Field(default_factory=_default_stops)


class GradientZone(_Frozen):
    """One edge band of a zoned gradient."""
    enabled: bool = True
    height: int = Field(default=400, ge=0)
    type: GradientType = GradientType.LINEAR
    angle: float = 0
    center_x: float = 50                # Radial center, % of band width
    center_y: float = 0                 # Radial center, % of band height
    stops: List[GradientStop] = Field(default_factory=_default_stops)


class ZonedGradientConfig(_Frozen):
    """Independent top and bottom gradient bands."""
    mode: Literal["zoned"] = "zoned"
    enabled: bool = True
    top: GradientZone = Field(default_factory=GradientZone)
    bottom: GradientZone = Field(default_factory=GradientZone)


AnyGradient = Annotated[
    Union[GradientConfig, ZonedGradientConfig],
    Field(discriminator="mode"),
]


# ============== Text models ==============

class FillKind(str, Enum):
    SOLID = "solid"
    GOLDEN = "golden"


class FillSpec(_Frozen):
    """Text fill: a flat colour or the golden gradient marker."""
    kind: FillKind = FillKind.SOLID
    color: Optional[str] = None         # None = role default

    @field_validator("color")
    @classmethod
    def _check_color(cls, value):
        return _check_paint_color(value)


class TextPositions(_Frozen):
    title_y: int = 120
    text_y: int = 400
    quote_y: int = 750


class FontFamilies(_Frozen):
    title: str = "Georgia, serif"
    body: str = "Georgia, serif"
    quote: str = "Georgia, serif"
    caption: str = "Georgia, serif"


class FontSizes(_Frozen):
    title: int = Field(default=72, gt=0)
    body: int = Field(default=32, gt=0)
    quote: int = Field(default=28, gt=0)
    caption: int = Field(default=24, gt=0)


class CustomFonts(_Frozen):
    """Optional font resources per role (URL, data URL, path or bytes)."""
    title: Optional[ResourceRef] = None
    body: Optional[ResourceRef] = None
    quote: Optional[ResourceRef] = None
    caption: Optional[ResourceRef] = None


class TextFills(_Frozen):
    title: FillSpec = FillSpec(kind=FillKind.GOLDEN)
    body: FillSpec = FillSpec()
    quote: FillSpec = FillSpec(kind=FillKind.GOLDEN)
    caption: FillSpec = FillSpec(color="#ffd700")


# ============== Shapes and placement ==============

class QuoteBox(_Frozen):
    style: QuoteBoxStyle = QuoteBoxStyle.ROUNDED
    width: int = Field(default=600, gt=0)
    height: int = Field(default=150, gt=0)


class ImageCrop(_Frozen):
    """Transform applied to the cover-fitted background image."""
    offset_x: int = 0
    offset_y: int = 0
    scale: float = Field(default=1.0, gt=0)


class ClipartPlacement(_Frozen):
    image: ResourceRef
    center_x: int = CANVAS_WIDTH // 2
    center_y: int = 540
    width: int = Field(default=200, gt=0)
    height: int = Field(default=200, gt=0)


# ============== Icon rows ==============

class RowMode(str, Enum):
    INLINE = "inline"       # One row centered as a whole
    STACKED = "stacked"     # Each item centered on its own line


class IconRowEntry(_Frozen):
    icon: IconId
    label: str = ""


class IconRow(_Frozen):
    entries: List[IconRowEntry] = Field(default_factory=list)
    gap: int = Field(default=50, ge=0)
    y: int = 1020
    center_x: Optional[int] = None      # None = canvas center
    icon_size: int = Field(default=24, gt=0)
    font_size: int = Field(default=20, gt=0)
    color: str = "#ffd700"
    mode: RowMode = RowMode.INLINE

    @field_validator("color")
    @classmethod
    def _check_color(cls, value):
        return _check_paint_color(value)


def _social_row() -> IconRow:
    return IconRow(
        entries=[
            IconRowEntry(icon=IconId.TELEGRAM, label="@username"),
            IconRowEntry(icon=IconId.INSTAGRAM, label="@username"),
            IconRowEntry(icon=IconId.TIKTOK, label="@username"),
        ],
        y=1020,
    )


def _info_row() -> IconRow:
    return IconRow(
        entries=[
            IconRowEntry(icon=IconId.LOCATION),
            IconRowEntry(icon=IconId.CLOCK),
            IconRowEntry(icon=IconId.CALENDAR),
        ],
        y=880,
    )


# ============== Poster ==============

class PosterSpec(_Frozen):
    """Complete declarative description of one poster."""
    title: str = ""
    body: str = ""
    quote: str = ""
    background: Optional[ResourceRef] = None
    template: int = 1
    language: Language = Language.AMHARIC
    captions_enabled: bool = True
    positions: TextPositions = TextPositions()
    fonts: FontFamilies = FontFamilies()
    font_sizes: FontSizes = FontSizes()
    custom_fonts: CustomFonts = CustomFonts()
    fills: TextFills = TextFills()
    quote_box: QuoteBox = QuoteBox()
    frame: FrameStyle = FrameStyle.NONE
    frame_color: Optional[str] = None   # None = template frame colour
    crop: ImageCrop = ImageCrop()
    clipart: Optional[ClipartPlacement] = None
    social_row: IconRow = Field(default_factory=_social_row)
    info_row: IconRow = Field(default_factory=_info_row)
    gradient: AnyGradient = Field(default_factory=GradientConfig)

    @field_validator("frame_color")
    @classmethod
    def _check_frame_color(cls, value: Optional[str]) -> Optional[str]:
        return _check_paint_color(value)
