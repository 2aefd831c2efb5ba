from __future__ import annotations

from typing import Any

CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"


def build_fcm_payload(
    token: str,
    device_type: str,
    title: str,
    body: str,
    channel: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "to": token,
        "notification": {
            "title": title,
            "body": body,
        },
    }

    if data is not None:
        payload["data"] = {**data, "click_action": CLICK_ACTION}

    if device_type == "android":
        payload["android"] = {
            "notification": {
                "channel_id": channel,
                "sound": "default",
                "priority": "high",
            },
            "priority": "high",
        }
    elif device_type == "ios":
        payload["apns"] = {
            "payload": {
                "aps": {
                    "sound": "default",
                    "badge": 1,
                    "category": channel,
                    "content-available": 1,
                },
            },
            "headers": {"apns-priority": "10"},
        }
        # Legacy top-level fields still read by older iOS clients.
        payload["notification"]["sound"] = "default"
        payload["notification"]["badge"] = "1"
    elif device_type == "web":
        payload["notification"]["tag"] = channel

    return payload
