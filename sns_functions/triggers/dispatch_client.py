from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

import requests

from sns_functions.errors import DispatchFailedError, FunctionError
from sns_functions.models.schemas import PushNotificationRequest
from sns_functions.notifications.service import PushDispatcher


class DispatchClient(ABC):
    @abstractmethod
    def send(self, request: PushNotificationRequest) -> dict[str, Any]:
        """Deliver through the push dispatcher; raises DispatchFailedError on a non-success response."""
        raise NotImplementedError


class LocalDispatchClient(DispatchClient):
    def __init__(self, dispatcher: PushDispatcher) -> None:
        self.dispatcher = dispatcher

    def send(self, request: PushNotificationRequest) -> dict[str, Any]:
        try:
            return self.dispatcher.dispatch(request)
        except FunctionError as exc:
            raise DispatchFailedError(exc.status_code, json.dumps(exc.to_body(), ensure_ascii=False)) from exc


class RemoteDispatchClient(DispatchClient):
    def __init__(
        self,
        url: str,
        service_role_key: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.service_role_key = service_role_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def send(self, request: PushNotificationRequest) -> dict[str, Any]:
        resp = self.session.post(
            self.url,
            headers={
                "Authorization": f"Bearer {self.service_role_key}",
                "Content-Type": "application/json",
            },
            json=request.model_dump(by_alias=True, exclude_none=True),
            timeout=self.timeout_seconds,
        )
        if not resp.ok:
            raise DispatchFailedError(resp.status_code, resp.text)
        return resp.json()
