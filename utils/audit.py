from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from flask import current_app, g


class ActivityLog:
    """Bounded, newest-first record of what staff did this session."""

    def __init__(self, maxlen: int = 50) -> None:
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=max(1, int(maxlen)))

    def append(self, entry: Dict[str, Any]) -> None:
        self._entries.appendleft(entry)

    def recent(self, limit: int = 10) -> List[Dict[str, Any]]:
        return list(self._entries)[: max(0, limit)]

    def __len__(self) -> int:
        return len(self._entries)


def _activity_log() -> ActivityLog:
    return current_app.extensions["activity_log"]


def log_event(action: str, target: Optional[str] = None, detail: Optional[str] = None) -> Dict[str, Any]:
    controller = getattr(g, "dashboard_session", None)
    identity = controller.identity if controller is not None else None
    entry = {
        "action": action,
        "target": target,
        "detail": detail,
        "user_id": identity.id if identity else None,
        "username": identity.display_name if identity else None,
        "user_role": identity.role.value if identity else None,
        "created_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
    }
    _activity_log().append(entry)
    current_app.logger.info("audit %s target=%s user=%s", action, target, entry["user_id"])
    return entry


def fetch_activity(limit: int = 10) -> List[Dict[str, Any]]:
    return _activity_log().recent(limit)
