"""Narrative insights from the Perplexity chat-completion endpoint."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx

from sync_app.config import Settings, get_settings
from sync_app.exceptions import MissingCredentialsError, UpstreamServiceError
from sync_app.services.http import post_once
from sync_app.services.insight_prompt import build_insight_prompt, insight_system_prompt


logger = logging.getLogger(__name__)

NO_INSIGHTS = "No insights."


class InsightClient:
    """Sends one insight prompt per call; no streaming, no conversation state."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._http_client = http_client

    async def generate_insights(self, prompt: str, system_prompt: str) -> str:
        """
        Ask the chat-completion service for a narrative.

        Returns:
            ``choices[0].message.content`` or ``"No insights."`` when absent

        Raises:
            MissingCredentialsError: no Perplexity key is configured
            UpstreamServiceError: the service answered with a non-success status
        """
        api_key = self.settings.perplexity_api_key
        if not api_key:
            raise MissingCredentialsError("Missing Perplexity credentials")

        payload = {
            "model": self.settings.perplexity_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
        }
        response = await post_once(
            self.settings.perplexity_url,
            service="Perplexity",
            timeout=self.settings.http_timeout_seconds,
            http_client=self._http_client,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
        )
        try:
            data = response.json()
        except ValueError as err:
            raise UpstreamServiceError("Perplexity returned a non-JSON body", detail=response.text) from err
        logger.debug("Perplexity response: %s", data)
        return self.extract_content(data)

    async def insights_for_records(self, records: Sequence[Mapping[str, Any]]) -> str:
        """Build the before/after prompt for ``records`` and request insights."""
        prompt_path = self.settings.prompt_config_path
        prompt = build_insight_prompt(records, prompt_path, self.settings.sync_start_index)
        logger.info("Requesting insights for %d records", len(records))
        return await self.generate_insights(prompt, insight_system_prompt(prompt_path))

    @staticmethod
    def extract_content(data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return NO_INSIGHTS
        if not isinstance(content, str) or not content:
            return NO_INSIGHTS
        return content
