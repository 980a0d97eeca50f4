"""
Poster API models for FastAPI endpoints.
"""

from pydantic import BaseModel, Field
from typing import Literal, Optional, List

from .models import PosterSpec


class PosterOptionsResponse(BaseModel):
    """Response with available poster options."""
    templates: List[dict]
    frames: List[str]
    quote_boxes: List[str]
    languages: List[str]
    icons: dict


class PosterShareRequest(BaseModel):
    """Render a poster and hand it to an exporter."""
    spec: PosterSpec = Field(default_factory=PosterSpec)
    target: Literal["telegram", "file"] = "telegram"
    filename: Optional[str] = None
    caption: Optional[str] = None


class PosterShareResponse(BaseModel):
    """Response from poster export."""
    status: str
    exporter: str
    filename: str
    size: int
    location: Optional[str] = None
    layers: List[str] = []
    diagnostics: List[str] = []
