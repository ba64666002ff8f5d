"""Text-to-speech endpoint used by the narration UI."""
from __future__ import annotations

import logging

from fastapi import APIRouter

from sync_app.models.schemas import SpeakRequest, SpeakResponse
from sync_app.services.speech import SpeechClient


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/speech", tags=["speech"])


@router.post("/speak", response_model=SpeakResponse)
async def speak(request: SpeakRequest) -> dict[str, str]:
    """Return ``{"audioContent": <base64 audio>}`` for one instruction."""
    audio = await SpeechClient().synthesize_base64(request.textToSpeak)
    return {"audioContent": audio}
