"""
How a device renders an offer push and where a click on it leads.
"""
from typing import Any, Mapping, Optional

from api.notifications.schemas import (
    NotificationDisplay, NotificationOptions, NotificationData, NotificationAction,
)

DEFAULT_TITLE = "BV Celular"
DEFAULT_BODY = "Nova oferta disponível!"
DEFAULT_URL = "/"
NOTIFICATION_ICON = "/icons/-192x192.png"
NOTIFICATION_BADGE = "/icons/-48x48.png"
OPEN_ACTION = NotificationAction(action="open", title="Ver Oferta")


def build_notification(payload: Optional[Mapping[str, Any]] = None) -> NotificationDisplay:
    """
    Turn a push payload into the notification to show.
    Missing or empty title, body and url fall back to the defaults.
    """
    payload = payload or {}
    return NotificationDisplay(
        title=payload.get("title") or DEFAULT_TITLE,
        options=NotificationOptions(
            body=payload.get("body") or DEFAULT_BODY,
            icon=NOTIFICATION_ICON,
            badge=NOTIFICATION_BADGE,
            image=payload.get("image") or None,
            data=NotificationData(url=payload.get("url") or DEFAULT_URL),
            actions=[OPEN_ACTION],
        )
    )


def resolve_click_url(notification_data: Optional[Mapping[str, Any]] = None) -> str:
    """The page a click on the notification opens."""
    return (notification_data or {}).get("url") or DEFAULT_URL
