"""Notifications domain for transient user-facing toasts."""

from speciescatalog.notifications.toasts import (
    Notifier,
    SessionToastNotifier,
    Severity,
    Toast,
    ToastQueue,
    pop_session_toasts,
)

__all__ = [
    "Notifier",
    "SessionToastNotifier",
    "Severity",
    "Toast",
    "ToastQueue",
    "pop_session_toasts",
]
