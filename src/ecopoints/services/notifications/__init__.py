"""Change notification module."""

from ecopoints.services.notifications.notifier import (
    ChangeNotifier,
    NotifierStats,
    Subscriber,
    get_change_notifier,
    reset_change_notifier,
)
from ecopoints.services.notifications.schemas import ChangeEvent, ChangeType

__all__ = [
    # Notifier
    "ChangeNotifier",
    "NotifierStats",
    "Subscriber",
    "get_change_notifier",
    "reset_change_notifier",
    # Schemas
    "ChangeEvent",
    "ChangeType",
]
