"""Narration sessions that read the latest workout plan aloud, one day at a time."""
from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sync_app.database import get_db
from sync_app.models.schemas import PlaybackRequest, PlaybackSessionResponse
from sync_app.routers.workout_plans import stored_plan_days
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.playback import NarrationPlayer
from sync_app.services.speech import SpeechClient
from sync_app.services.workout_planner import format_instructions


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])

# In-process registry, oldest first; each player owns its own session state.
MAX_SESSIONS = 50
_players: dict[str, NarrationPlayer] = {}


def _evict_sessions() -> None:
    """Make room for one more session, dropping the oldest inactive ones first."""
    while _players and len(_players) >= MAX_SESSIONS:
        session_id = next(
            (sid for sid, player in _players.items() if not player.session.is_active),
            next(iter(_players)),
        )
        _players.pop(session_id).stop()
        logger.info("Evicted narration session %s", session_id)


def _get_player(session_id: str) -> NarrationPlayer:
    player = _players.get(session_id)
    if player is None:
        raise HTTPException(status_code=404, detail="Narration session not found")
    return player


def _session_payload(session_id: str, player: NarrationPlayer, include_audio: bool = False) -> PlaybackSessionResponse:
    session = player.session
    return PlaybackSessionResponse(
        session_id=session_id,
        state=session.state.value,
        progress=session.progress,
        current_index=session.current_index,
        instruction=session.current_instruction,
        instruction_count=len(session.instructions),
        error=session.error,
        audioContent=player.audio_content if include_audio else None,
    )


@router.post("/sessions", response_model=PlaybackSessionResponse, status_code=201)
async def create_session(db: Annotated[Session, Depends(get_db)]) -> PlaybackSessionResponse:
    """Start a narration session over the latest stored plan."""
    entry = HealthRecordStore(db).latest_plan()
    if entry is None:
        raise HTTPException(status_code=404, detail="Error loading Gemini output")

    instructions = format_instructions(stored_plan_days(entry))
    session_id = uuid.uuid4().hex
    _evict_sessions()
    _players[session_id] = NarrationPlayer(instructions, SpeechClient().synthesize_base64)
    logger.info("Created narration session %s with %d instructions", session_id, len(instructions))
    return _session_payload(session_id, _players[session_id])


@router.get("/sessions/{session_id}", response_model=PlaybackSessionResponse)
async def get_session(session_id: str) -> PlaybackSessionResponse:
    return _session_payload(session_id, _get_player(session_id))


@router.post("/sessions/{session_id}/speak", response_model=PlaybackSessionResponse)
async def speak_current(session_id: str, request: PlaybackRequest | None = None) -> PlaybackSessionResponse:
    """Toggle: start narrating the current instruction, or stop if already active."""
    player = _get_player(session_id)
    duration = request.duration if request else None
    audio = await player.speak(duration=duration)
    return _session_payload(session_id, player, include_audio=audio is not None)


@router.post("/sessions/{session_id}/stop", response_model=PlaybackSessionResponse)
async def stop_session(session_id: str) -> PlaybackSessionResponse:
    player = _get_player(session_id)
    player.stop()
    return _session_payload(session_id, player)


@router.post("/sessions/{session_id}/complete", response_model=PlaybackSessionResponse)
async def complete_session(session_id: str) -> PlaybackSessionResponse:
    """Called by the player when the audio reached its end."""
    player = _get_player(session_id)
    player.complete()
    return _session_payload(session_id, player)


@router.post("/sessions/{session_id}/next", response_model=PlaybackSessionResponse)
async def next_instruction(session_id: str) -> PlaybackSessionResponse:
    player = _get_player(session_id)
    player.next_instruction()
    return _session_payload(session_id, player)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str) -> None:
    player = _players.pop(session_id, None)
    if player is not None:
        player.stop()
