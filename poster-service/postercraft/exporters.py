"""
Exporters - deliver a finished poster.

Both implementations receive PNG bytes only after a render pass has
completed; the caller picks which one to use.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from .config import PosterSettings, get_settings
from .errors import ExportError

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of one export."""
    exporter: str
    filename: str
    size: int                       # Bytes delivered
    location: Optional[str] = None  # File path or remote message id


class Exporter(ABC):
    """
    Abstract base class for export targets.

    All exporters (file, Telegram, ...) must implement this interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Exporter name for logging."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the exporter is configured."""
        pass

    @abstractmethod
    async def export(self, png: bytes, filename: str, caption: Optional[str] = None) -> ExportResult:
        """
        Deliver a finished poster.

        Args:
            png: Encoded poster
            filename: Suggested file name
            caption: Optional caption (share targets)

        Returns:
            ExportResult
        """
        pass


class FileExporter(Exporter):
    """Saves posters to a directory."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir or get_settings().output_dir)

    @property
    def name(self) -> str:
        return "file"

    def is_available(self) -> bool:
        return True

    async def export(self, png: bytes, filename: str, caption: Optional[str] = None) -> ExportResult:
        path = self.output_dir / Path(filename).name
        try:
            await asyncio.to_thread(self._write, path, png)
        except OSError as e:
            raise ExportError(f"Failed to write {path}: {e}") from e
        logger.info(f"Saved poster to {path}")
        return ExportResult(self.name, path.name, len(png), str(path))

    def _write(self, path: Path, png: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png)


class TelegramExporter(Exporter):
    """
    Shares posters through the Telegram Bot API (sendPhoto).

    Usage:
        exporter = TelegramExporter(bot_token="123:abc", chat_id="@channel")
        await exporter.export(png, "poster.png", caption="...")
    """

    def __init__(
        self,
        bot_token: Optional[str] = None,
        chat_id: Optional[str] = None,
        settings: Optional[PosterSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Telegram exporter.

        Args:
            bot_token: Bot token (default from settings)
            chat_id: Target chat (default from settings)
            settings: Engine settings. If None, reads from environment.
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings or get_settings()
        self.bot_token = bot_token or self.settings.telegram_bot_token
        self.chat_id = chat_id or self.settings.telegram_chat_id
        self.transport = transport

    @property
    def name(self) -> str:
        return "telegram"

    def is_available(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @property
    def endpoint(self) -> str:
        return f"{self.settings.telegram_api_base.rstrip('/')}/bot{self.bot_token}/sendPhoto"

    async def export(self, png: bytes, filename: str, caption: Optional[str] = None) -> ExportResult:
        if not self.is_available():
            raise ExportError("Telegram exporter needs a bot token and chat id")

        data = {"chat_id": self.chat_id}
        if caption:
            data["caption"] = caption

        try:
            async with httpx.AsyncClient(timeout=self.settings.http_timeout, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint,
                    data=data,
                    files={"photo": (filename, png, "image/png")},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            # Token is part of the URL; keep it out of the message
            raise ExportError(f"Telegram sendPhoto failed: {e.__class__.__name__}") from e

        if not payload.get("ok"):
            raise ExportError(f"Telegram rejected the photo: {payload.get('description', 'unknown error')}")

        message_id = payload.get("result", {}).get("message_id")
        logger.info(f"Shared poster to Telegram chat {self.chat_id} (message {message_id})")
        return ExportResult(self.name, filename, len(png), str(message_id) if message_id is not None else None)
