"""Transient, non-blocking user notifications ("toasts").

Workflow components only see the ``Notifier`` protocol. ``ToastQueue`` keeps
toasts in memory for a single dialog or API request; ``SessionToastNotifier``
parks them in the user's session so they render once on the next page.
"""

import logging
from collections.abc import MutableMapping
from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)

SESSION_KEY = "toasts"


class Severity(StrEnum):
    """Visual weight of a toast."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Toast(BaseModel):
    """A single transient message shown to the user."""

    title: str
    description: str | None = None
    severity: Severity = Severity.DEFAULT


class Notifier(Protocol):
    """Accepts toasts without blocking the caller."""

    def notify(
        self, title: str, description: str | None = None, severity: Severity = Severity.DEFAULT
    ) -> None: ...


class ToastQueue:
    """In-memory notifier whose toasts are drained by the owner."""

    def __init__(self) -> None:
        self.toasts: list[Toast] = []

    def notify(
        self, title: str, description: str | None = None, severity: Severity = Severity.DEFAULT
    ) -> None:
        toast = Toast(title=title, description=description, severity=severity)
        logger.debug("Toast queued: %s", toast.title)
        self.toasts.append(toast)

    def drain(self) -> list[Toast]:
        """Return all queued toasts and clear the queue."""
        toasts, self.toasts = self.toasts, []
        return toasts


class SessionToastNotifier:
    """Notifier that stores toasts in a session mapping for the next render."""

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self.session = session

    def notify(
        self, title: str, description: str | None = None, severity: Severity = Severity.DEFAULT
    ) -> None:
        toast = Toast(title=title, description=description, severity=severity)
        pending = list(self.session.get(SESSION_KEY, []))
        pending.append(toast.model_dump(mode="json"))
        self.session[SESSION_KEY] = pending


def pop_session_toasts(session: MutableMapping[str, Any]) -> list[Toast]:
    """Remove and return toasts parked in the session."""
    raw = session.pop(SESSION_KEY, None) or []
    toasts = []
    for item in raw:
        try:
            toasts.append(Toast.model_validate(item))
        except ValueError:
            logger.warning("Dropping malformed toast from session: %r", item)
    return toasts
