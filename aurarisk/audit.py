"""In-memory audit trail shared by the agents.

Each agent keeps its own trail of actions. Entries are appended, never
edited, and can be filtered by action and timestamp range. Listeners
receive every new entry as it is recorded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import pandas as pd

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: str | datetime) -> pd.Timestamp:
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


@dataclass
class AuditTrail:
    """Append-only log of agent actions.

    Attributes
    ----------
    agent_id : str
        Identifier stamped on every entry.
    entries : list[dict[str, Any]]
        Recorded entries, oldest first. Each has ``timestamp`` (ISO 8601),
        ``agent_id``, ``action`` and ``details``.
    """

    agent_id: str
    entries: list[dict[str, Any]] = field(default_factory=list)
    listeners: list[Listener] = field(default_factory=list, repr=False)

    def record(self, action: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
        """Append an entry and notify listeners."""
        entry = {
            "timestamp": utc_now().isoformat(),
            "agent_id": self.agent_id,
            "action": action,
            "details": details or {},
        }
        self.entries.append(entry)
        logger.info("%s %s %s", self.agent_id, action, entry["details"])

        for listener in self.listeners:
            listener(entry)

        return entry

    def subscribe(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def filter(
        self,
        action: str | None = None,
        date_from: str | datetime | None = None,
        date_to: str | datetime | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return entries matching every given criterion.

        Parameters
        ----------
        action : str | None
            Exact action name.
        date_from, date_to : str | datetime | None
            Inclusive timestamp bounds. Naive values are read as UTC.
        """
        trail = list(self.entries)

        if action:
            trail = [entry for entry in trail if entry["action"] == action]

        if date_from is not None:
            lower = _as_utc(date_from)
            trail = [entry for entry in trail if _as_utc(entry["timestamp"]) >= lower]

        if date_to is not None:
            upper = _as_utc(date_to)
            trail = [entry for entry in trail if _as_utc(entry["timestamp"]) <= upper]

        return trail

    def count(self, action: str) -> int:
        return sum(1 for entry in self.entries if entry["action"] == action)

    @property
    def last_timestamp(self) -> str | None:
        if not self.entries:
            return None
        return self.entries[-1]["timestamp"]

    def __len__(self) -> int:
        return len(self.entries)
