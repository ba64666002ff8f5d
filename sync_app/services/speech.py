"""Text-to-speech through the ElevenLabs API."""
from __future__ import annotations

import base64
import logging

import httpx

from sync_app.config import Settings, get_settings
from sync_app.exceptions import MissingCredentialsError
from sync_app.services.http import post_once


logger = logging.getLogger(__name__)


class SpeechClient:
    """Turns one instruction string into audio with the configured voice."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def synthesize(self, text: str) -> bytes:
        """Return the raw audio bytes for ``text``."""
        api_key = self.settings.elevenlabs_api_key
        voice_id = self.settings.elevenlabs_voice_id
        if not api_key or not voice_id:
            raise MissingCredentialsError("Missing ElevenLabs credentials")

        response = await post_once(
            f"{self.settings.elevenlabs_base_url}/{voice_id}",
            service="ElevenLabs",
            timeout=self.settings.http_timeout_seconds,
            http_client=self._http_client,
            error_status=400,
            json={"text": text},
            headers={
                "Content-Type": "application/json",
                "xi-api-key": api_key,
            },
        )
        logger.info("Synthesized %d characters into %d audio bytes", len(text), len(response.content))
        return response.content

    async def synthesize_base64(self, text: str) -> str:
        audio = await self.synthesize(text)
        return base64.b64encode(audio).decode("ascii")
