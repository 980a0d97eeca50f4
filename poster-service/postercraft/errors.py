"""Exceptions raised by the poster engine."""


class PosterError(Exception):
    """Base class for poster engine errors."""
    pass


class ResourceLoadFailure(PosterError):
    """An image, font or glyph could not be fetched or decoded."""

    def __init__(self, role: str, message: str):
        self.role = role
        super().__init__(f"{role}: {message}")


class ResourceTimeout(ResourceLoadFailure):
    """A resource did not settle within the configured wait."""
    pass


class MeasurementFailure(PosterError):
    """Text measurement failed (e.g. unsupported glyph)."""
    pass


class RenderSuperseded(PosterError):
    """A newer render pass started before this one finished."""

    def __init__(self, generation: int, current: int):
        self.generation = generation
        self.current = current
        super().__init__(f"Render pass {generation} superseded by pass {current}")


class RenderNotComplete(PosterError):
    """The surface was requested before any pass completed."""
    pass


class ExportError(PosterError):
    """An exporter failed to deliver the finished poster."""
    pass
