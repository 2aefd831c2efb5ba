from __future__ import annotations

from typing import Any

DEFAULT_CHANNEL = "general_channel"

CHANNEL_BY_TYPE: dict[str, str] = {
    "comment": "comment_channel",
    "like": "like_channel",
    "follow": "follow_channel",
    "message": "message_channel",
    "post": "post_channel",
}


def resolve_channel(channel_id: str | None = None, notification_type: Any = None) -> str:
    """Pick the Android channel / iOS category / web tag for a notification.

    ``notification_type`` comes from caller-supplied ``data`` and may hold any
    JSON value; anything that is not a known type string maps to the default.
    """
    if channel_id:
        return channel_id
    if isinstance(notification_type, str) and notification_type:
        return CHANNEL_BY_TYPE.get(notification_type, DEFAULT_CHANNEL)
    return DEFAULT_CHANNEL
