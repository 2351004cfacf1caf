"""
Session-scoped action recording.

An ``ActionRecorder`` is created per viewing session and passed to the
components that report user actions (selection, filtering, blast radius).
Nothing is sent anywhere: actions are kept in a bounded in-memory history
and echoed to the module logger at DEBUG level.
"""

import logging
import uuid
from collections import Counter, deque
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Deque, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..config import MAX_ACTION_HISTORY

logger = logging.getLogger(__name__)


class ActionType(StrEnum):
    GRAPH_LOAD = "graph_load"
    NODE_SELECT = "node_select"
    SELECTION_CHANGE = "selection_change"
    FILTER_CHANGE = "filter_change"
    SEARCH = "search"
    BLAST_RADIUS = "blast_radius"
    PATH_HIGHLIGHT = "path_highlight"
    LAYOUT_CHANGE = "layout_change"


class ActionEntry(BaseModel):
    type: ActionType
    session_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    properties: Dict[str, Any] = Field(default_factory=dict)


class ActionRecorder:
    """
    Collects user actions for one session.

    ``close()`` ends the session; later ``record`` calls are ignored.
    """

    def __init__(
        self,
        enabled: bool = True,
        max_history: int = MAX_ACTION_HISTORY,
        exclude: Iterable[ActionType] = (),
    ):
        self.session_id = uuid.uuid4().hex
        self.enabled = enabled
        self._exclude = set(exclude)
        self._history: Deque[ActionEntry] = deque(maxlen=max_history)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def record(self, action: ActionType, **properties: Any) -> Optional[ActionEntry]:
        """Store an action. Returns the entry, or None when it was skipped."""
        if self._closed or not self.enabled or action in self._exclude:
            return None

        entry = ActionEntry(type=action, session_id=self.session_id, properties=properties)
        self._history.append(entry)
        logger.debug("action %s %s", action.value, properties)
        return entry

    def history(self, limit: Optional[int] = None) -> List[ActionEntry]:
        entries = list(self._history)
        if limit is not None:
            return entries[-limit:] if limit > 0 else []
        return entries

    def counts(self) -> Dict[str, int]:
        return dict(Counter(entry.type.value for entry in self._history))

    def summary(self) -> Dict[str, Any]:
        entries = list(self._history)
        first = entries[0].timestamp if entries else None
        last = entries[-1].timestamp if entries else None
        duration = (last - first).total_seconds() if first and last else 0.0
        return {
            "session_id": self.session_id,
            "action_count": len(entries),
            "action_counts": self.counts(),
            "duration_seconds": duration,
            "first_action": first.isoformat() if first else None,
            "last_action": last.isoformat() if last else None,
        }

    def clear(self) -> None:
        self._history.clear()

    def close(self) -> None:
        """End the session and release its history."""
        if self._closed:
            return
        logger.debug("closing action session %s (%d actions)", self.session_id, len(self._history))
        self._history.clear()
        self._closed = True

    def __enter__(self) -> "ActionRecorder":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
