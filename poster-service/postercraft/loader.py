"""
ResourceLoader - fetches and decodes everything a poster depends on.

Handles:
1. Background and clipart images (Pillow)
2. Custom font files (validated with FreeType)
3. Built-in icon glyphs (drawn, or overridden from icons_dir)

Each reference is loaded once per session and shared by every caller.
Failures are cached too; nothing is retried automatically.
"""

import io
import base64
import asyncio
import hashlib
import logging
from enum import Enum
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import httpx
from PIL import Image

from .config import PosterSettings, get_settings
from .errors import ResourceLoadFailure, ResourceTimeout
from .fonts import DecodedFont
from .icons import draw_glyph
from .presets import IconId

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    IMAGE = "image"
    FONT = "font"
    GLYPH = "glyph"


class LoadState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass
class ResourceHandle:
    """A referenced resource and its load state."""
    role: str                   # e.g. "background", "font.title", "icon.clock"
    kind: ResourceKind
    ref: Union[str, bytes]
    state: LoadState = LoadState.PENDING
    value: Any = None
    error: Optional[str] = None

    @property
    def key(self) -> str:
        """Cache key: identical references share one load."""
        if isinstance(self.ref, bytes):
            digest = hashlib.sha1(self.ref).hexdigest()
        elif self.ref.startswith("data:"):
            digest = hashlib.sha1(self.ref.encode()).hexdigest()
        else:
            digest = self.ref
        return f"{self.kind.value}:{digest}"

    def describe(self) -> str:
        if isinstance(self.ref, bytes):
            return f"<{len(self.ref)} bytes>"
        if self.ref.startswith("data:"):
            return self.ref[:32] + "..."
        return self.ref


class ResourceLoader:
    """
    Loads poster resources concurrently with a bounded wait per resource.

    Usage:
        loader = ResourceLoader()
        handle = loader.handle("background", ResourceKind.IMAGE, url)
        resources = await loader.load_all({"background": handle})
    """

    def __init__(
        self,
        settings: Optional[PosterSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize loader.

        Args:
            settings: Engine settings. If None, reads from environment.
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings or get_settings()
        self.transport = transport
        self._handles: Dict[str, ResourceHandle] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._failures: Dict[str, ResourceLoadFailure] = {}
        self._roles: Dict[str, str] = {}

    def handle(self, role: str, kind: ResourceKind, ref: Union[str, bytes]) -> ResourceHandle:
        """
        Get the handle for a reference in a role.

        A new reference in a role that already held a different one
        discards the old cache entry once no other role uses it.
        """
        candidate = ResourceHandle(role=role, kind=kind, ref=ref)
        key = candidate.key

        previous = self._roles.get(role)
        self._roles[role] = key
        if previous and previous != key and previous not in self._roles.values():
            logger.debug(f"Discarding superseded resource for {role}")
            self._handles.pop(previous, None)
            self._tasks.pop(previous, None)
            self._failures.pop(previous, None)

        existing = self._handles.get(key)
        if existing is not None:
            return existing
        self._handles[key] = candidate
        return candidate

    def load(self, handle: ResourceHandle) -> "asyncio.Future":
        """
        Start (or join) the load of a handle.

        Settled handles answer from the cache on the running loop, so one
        loader can serve several event loops in turn.
        """
        key = handle.key
        if key in self._failures or handle.state == LoadState.READY:
            future = asyncio.get_running_loop().create_future()
            if key in self._failures:
                future.set_exception(self._failures[key])
            else:
                future.set_result(handle.value)
            return future

        task = self._tasks.get(key)
        if task is None or task.cancelled() or task.get_loop() is not asyncio.get_running_loop():
            task = asyncio.ensure_future(self._load(handle))
            self._tasks[key] = task
        return task

    async def load_all(self, handles: Mapping[str, ResourceHandle]) -> Dict[str, Optional[Any]]:
        """
        Wait for every handle to settle.

        Failed or timed-out resources map to None so callers can apply
        their fallback.

        Args:
            handles: Mapping of role -> handle (roles may share a handle)

        Returns:
            Mapping of role -> decoded resource (or None)
        """
        roles = list(handles)
        # Loads are shared between passes; cancelling one pass must not cancel them
        results = await asyncio.gather(
            *(asyncio.shield(self.load(handles[role])) for role in roles), return_exceptions=True
        )

        settled: Dict[str, Optional[Any]] = {}
        for role, result in zip(roles, results):
            if isinstance(result, ResourceLoadFailure):
                logger.warning(f"Resource unavailable for {role}, using fallback: {result}")
                settled[role] = None
            elif isinstance(result, asyncio.CancelledError):
                # The shared load was cancelled from outside this pass
                logger.warning(f"Load for {role} was cancelled, using fallback")
                settled[role] = None
            elif isinstance(result, BaseException):
                raise result
            else:
                settled[role] = result
        return settled

    async def _load(self, handle: ResourceHandle) -> Any:
        timeout = self.settings.resource_timeout
        try:
            value = await asyncio.wait_for(self._fetch_and_decode(handle), timeout=timeout)
        except asyncio.TimeoutError:
            handle.state = LoadState.FAILED
            handle.error = f"not ready after {timeout}s"
            failure = ResourceTimeout(handle.role, handle.error)
            self._failures[handle.key] = failure
            raise failure
        except (OSError, ValueError, EOFError, SyntaxError, Image.DecompressionBombError, httpx.HTTPError) as e:
            handle.state = LoadState.FAILED
            handle.error = str(e) or e.__class__.__name__
            failure = ResourceLoadFailure(handle.role, handle.error)
            self._failures[handle.key] = failure
            raise failure from e

        handle.state = LoadState.READY
        handle.value = value
        logger.debug(f"Loaded {handle.kind.value} for {handle.role}: {handle.describe()}")
        return value

    async def _fetch_and_decode(self, handle: ResourceHandle) -> Any:
        if handle.kind == ResourceKind.GLYPH:
            return await self._load_glyph(handle)

        data = await self._read_bytes(handle.ref)
        if handle.kind == ResourceKind.FONT:
            return DecodedFont(data, name=handle.role)
        return self._decode_image(data)

    async def _load_glyph(self, handle: ResourceHandle) -> Image.Image:
        icon = IconId(handle.ref)
        if self.settings.icons_dir:
            override = Path(self.settings.icons_dir) / f"{icon.value}.png"
            if override.exists():
                data = await asyncio.to_thread(override.read_bytes)
                return self._decode_image(data)
        return draw_glyph(icon)

    async def _read_bytes(self, ref: Union[str, bytes]) -> bytes:
        if isinstance(ref, bytes):
            return ref

        if ref.startswith("data:"):
            header, _, payload = ref.partition(",")
            if ";base64" in header:
                return base64.b64decode(payload, validate=True)
            return payload.encode()

        if ref.startswith(("http://", "https://")):
            async with httpx.AsyncClient(
                timeout=self.settings.http_timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(ref)
                response.raise_for_status()
                return response.content

        return await asyncio.to_thread(Path(ref).read_bytes)

    @staticmethod
    def _decode_image(data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image.convert("RGBA")
