from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any

import requests

from sns_functions.config import Settings
from sns_functions.errors import PushGatewayError


class BasePushGateway(ABC):
    name: str = "base"

    @abstractmethod
    def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError


class MockPushGateway(BasePushGateway):
    name = "mock"

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self.sent.append(payload)
        return {
            "multicast_id": 0,
            "success": 1,
            "failure": 0,
            "results": [{"message_id": f"mock-{uuid.uuid4().hex}"}],
        }


class FCMPushGateway(BasePushGateway):
    name = "fcm"

    def __init__(
        self,
        server_key: str,
        send_url: str = "https://fcm.googleapis.com/fcm/send",
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.server_key = server_key
        self.send_url = send_url
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def send(self, payload: dict[str, Any]) -> dict[str, Any]:
        resp = self.session.post(
            self.send_url,
            headers={
                "Authorization": f"key={self.server_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=self.timeout_seconds,
        )
        if not resp.ok:
            raise PushGatewayError(resp.status_code, resp.text)
        return resp.json()


def build_gateway(settings: Settings) -> BasePushGateway:
    if settings.notification_provider == "mock":
        return MockPushGateway()
    return FCMPushGateway(
        server_key=settings.fcm_server_key,
        send_url=settings.fcm_send_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
