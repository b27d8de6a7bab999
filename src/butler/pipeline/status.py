"""Embedding-generation status — explicit state object with broadcast.

One instance is owned by the indexing orchestrator and handed to whoever
needs to observe it. Subscribers get a ``queue.Queue`` that receives every
state change.
"""

from __future__ import annotations

import logging
import queue
import threading
from enum import StrEnum

logger = logging.getLogger(__name__)


class IndexingState(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class EmbeddingStatus:
    """Guarded ``NOT_STARTED → IN_PROGRESS → COMPLETE`` state machine."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = IndexingState.NOT_STARTED
        self._subscribers: list[queue.Queue[IndexingState]] = []

    @property
    def state(self) -> IndexingState:
        with self._lock:
            return self._state

    @property
    def is_generating(self) -> bool:
        return self.state == IndexingState.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        return self.state == IndexingState.COMPLETE

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Move to IN_PROGRESS.

        Returns:
            False if a rebuild is already running or finished, so the caller
            should not start another one.
        """
        return self._transition({IndexingState.NOT_STARTED}, IndexingState.IN_PROGRESS)

    def mark_complete(self) -> bool:
        return self._transition(
            {IndexingState.NOT_STARTED, IndexingState.IN_PROGRESS},
            IndexingState.COMPLETE,
        )

    def reset(self) -> None:
        self._transition(set(IndexingState), IndexingState.NOT_STARTED)

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------

    def subscribe(self) -> queue.Queue[IndexingState]:
        channel: queue.Queue[IndexingState] = queue.Queue()
        with self._lock:
            self._subscribers.append(channel)
        return channel

    def unsubscribe(self, channel: queue.Queue[IndexingState]) -> None:
        with self._lock:
            if channel in self._subscribers:
                self._subscribers.remove(channel)

    def _transition(self, allowed: set[IndexingState], target: IndexingState) -> bool:
        with self._lock:
            if self._state not in allowed:
                return False
            changed = self._state != target
            self._state = target
            subscribers = list(self._subscribers)

        if changed:
            logger.info("Embedding status -> %s", target)
            for channel in subscribers:
                channel.put(target)
        return True
