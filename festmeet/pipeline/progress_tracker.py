"""Ingestion progress tracking with callback-based listener notification.

Tracks the current phase and progress percentage for each ingestion session
and broadcasts updates to registered listener callbacks.  Listeners are
keyed by session ID so several people's uploads can be processed without
cross-talk.

    ScheduleIngestionPipeline --update()--> ProgressTracker --callback()--> progress bar
                                                            --callback()--> (any other listener)

Listener errors are caught and logged so a broken listener cannot stall
ingestion.  Both sync and async callbacks are supported.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from festmeet.models.ingestion import IngestionPhase
from festmeet.utils.logging import get_logger


@dataclass
class _SessionStatus:
    """Internal snapshot of a single session's progress."""

    phase: IngestionPhase = IngestionPhase.PENDING
    progress: float = 0.0
    message: str = ""


class ProgressTracker:
    """Tracks and broadcasts ingestion progress via callbacks.

    Each ingestion session is identified by a string ``session_id``.
    Consumers register callbacks that are invoked whenever :meth:`update`
    is called for that session.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, _SessionStatus] = {}
        self._listeners: dict[str, list[Callable]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def update(
        self,
        session_id: str,
        phase: IngestionPhase,
        progress: float,
        message: str,
    ) -> None:
        """Record a progress update and notify all registered listeners.

        Parameters
        ----------
        session_id:
            The ingestion session to update.
        phase:
            The current ingestion phase.
        progress:
            Completion percentage (0.0 to 100.0); clamped to that range.
        message:
            Human-readable status message.
        """
        progress = max(0.0, min(100.0, progress))

        self._statuses[session_id] = _SessionStatus(
            phase=phase,
            progress=progress,
            message=message,
        )

        self._logger.debug(
            "progress_update",
            session_id=session_id,
            phase=phase.value,
            progress=round(progress, 1),
            message=message,
        )

        await self._notify_listeners(session_id, phase, progress, message)

    def register_listener(self, session_id: str, callback: Callable) -> None:
        """Register a callback to receive progress updates for a session.

        The callback may be sync or async and receives
        ``(session_id, phase, progress, message)``.
        """
        listeners = self._listeners.setdefault(session_id, [])
        if callback not in listeners:
            listeners.append(callback)
            self._logger.debug(
                "listener_registered",
                session_id=session_id,
                total_listeners=len(listeners),
            )

    def unregister_listener(self, session_id: str, callback: Callable) -> None:
        listeners = self._listeners.get(session_id, [])
        if callback in listeners:
            listeners.remove(callback)
            self._logger.debug(
                "listener_unregistered",
                session_id=session_id,
                remaining_listeners=len(listeners),
            )

    def get_status(self, session_id: str) -> dict:
        """Return the current phase, progress and message for a session.

        Untracked sessions report ``PENDING`` at 0%.
        """
        status = self._statuses.get(session_id) or _SessionStatus()
        return {
            "phase": status.phase.value,
            "progress": status.progress,
            "message": status.message,
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(
        self,
        session_id: str,
        phase: IngestionPhase,
        progress: float,
        message: str,
    ) -> None:
        for callback in list(self._listeners.get(session_id, [])):
            try:
                result = callback(session_id, phase, progress, message)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    session_id=session_id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
