"""Narration of workout instructions with simulated playback progress.

Progress is an estimate: it advances by 10 every ``duration / 10`` seconds
rather than following the real playback position. ``complete()`` is the
signal that playback actually finished.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Sequence

from sync_app.exceptions import SyncAppError


logger = logging.getLogger(__name__)

DEFAULT_AUDIO_DURATION_SECONDS = 10.0
PROGRESS_STEP = 10
PROGRESS_MAX = 100

Synthesizer = Callable[[str], Awaitable[str]]


class PlaybackState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    PLAYING = "playing"
    COMPLETED = "completed"
    STOPPED = "stopped"


_TRANSITIONS: dict[PlaybackState, set[PlaybackState]] = {
    PlaybackState.IDLE: {PlaybackState.REQUESTING},
    PlaybackState.REQUESTING: {PlaybackState.PLAYING, PlaybackState.STOPPED, PlaybackState.IDLE},
    PlaybackState.PLAYING: {PlaybackState.COMPLETED, PlaybackState.STOPPED},
    PlaybackState.COMPLETED: {PlaybackState.REQUESTING},
    PlaybackState.STOPPED: {PlaybackState.REQUESTING},
}


@dataclass
class PlaybackSession:
    """Playback state owned by a single ``NarrationPlayer``."""

    instructions: list[str] = field(default_factory=list)
    current_index: int = 0
    state: PlaybackState = PlaybackState.IDLE
    progress: int = 0
    error: str | None = None

    @property
    def current_instruction(self) -> str | None:
        if 0 <= self.current_index < len(self.instructions):
            return self.instructions[self.current_index]
        return None

    @property
    def is_active(self) -> bool:
        return self.state in (PlaybackState.REQUESTING, PlaybackState.PLAYING)


class NarrationPlayer:
    """Drives a ``PlaybackSession`` through idle → requesting → playing → completed/stopped."""

    def __init__(self, instructions: Sequence[str], synthesize: Synthesizer) -> None:
        self.session = PlaybackSession(instructions=list(instructions))
        self.audio_content: str | None = None
        self._synthesize = synthesize
        self._ticker: asyncio.Task | None = None

    def _transition(self, target: PlaybackState) -> None:
        current = self.session.state
        if target not in _TRANSITIONS[current]:
            raise RuntimeError(f"Invalid playback transition {current.value} -> {target.value}")
        logger.debug("Playback %s -> %s", current.value, target.value)
        self.session.state = target

    async def speak(self, duration: float | None = None) -> str | None:
        """
        Synthesize the current instruction and start progress tracking.

        Acts as ``stop()`` while a request or playback is in progress.

        Args:
            duration: Audio length in seconds if the player knows it

        Returns:
            Base64 audio, or ``None`` when nothing will be played
        """
        if self.session.is_active:
            self.stop()
            return None

        text = self.session.current_instruction
        if text is None:
            self.session.error = "No instructions to narrate"
            return None

        self._transition(PlaybackState.REQUESTING)
        self.session.progress = 0
        self.session.error = None
        self.audio_content = None

        try:
            audio = await self._synthesize(text)
        except SyncAppError as err:
            logger.error("Error calling TTS for instruction %d: %s", self.session.current_index, err)
            if self.session.state is PlaybackState.REQUESTING:
                self.session.error = str(err)
                self._transition(PlaybackState.IDLE)
            return None

        if self.session.state is not PlaybackState.REQUESTING:
            logger.info("Playback stopped while audio was requested; discarding audio")
            return None

        self.audio_content = audio
        self._transition(PlaybackState.PLAYING)
        self._start_ticker(duration or DEFAULT_AUDIO_DURATION_SECONDS)
        return audio

    def _start_ticker(self, duration: float) -> None:
        self._cancel_ticker()
        interval = duration / (PROGRESS_MAX / PROGRESS_STEP)
        self._ticker = asyncio.get_running_loop().create_task(self._tick(interval))

    async def _tick(self, interval: float) -> None:
        while self.session.progress < PROGRESS_MAX:
            await asyncio.sleep(interval)
            if self.session.state is not PlaybackState.PLAYING:
                return
            self.session.progress = min(self.session.progress + PROGRESS_STEP, PROGRESS_MAX)

    def _cancel_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def stop(self) -> None:
        """Stop playback: cancel the timer and reset progress to 0."""
        self._cancel_ticker()
        self.session.progress = 0
        if self.session.is_active:
            self._transition(PlaybackState.STOPPED)

    def complete(self) -> bool:
        """Mark natural end of playback. Ignored unless playing."""
        if self.session.state is not PlaybackState.PLAYING:
            logger.debug("Ignoring completion in state %s", self.session.state.value)
            return False
        self._cancel_ticker()
        self.session.progress = PROGRESS_MAX
        self._transition(PlaybackState.COMPLETED)
        return True

    def next_instruction(self) -> bool:
        """Advance to the next instruction, stopping playback. False at the last one."""
        if self.session.current_index >= len(self.session.instructions) - 1:
            return False
        self.session.current_index += 1
        self.stop()
        return True

    @property
    def has_pending_timer(self) -> bool:
        return self._ticker is not None and not self._ticker.done()
