from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from sns_functions.config import Settings
from sns_functions.errors import (
    DeviceTokenStoreError,
    RequestValidationFailed,
    ResourceNotFound,
    UpstreamFailure,
)
from sns_functions.models.schemas import DeviceTokenItem, DispatchResult, PushDispatchResponse, PushNotificationRequest
from sns_functions.notifications.channels import resolve_channel
from sns_functions.notifications.payloads import build_fcm_payload
from sns_functions.notifications.providers import BasePushGateway
from sns_functions.storage.repository import DeviceRepository
from sns_functions.utils.text import mask_token

logger = logging.getLogger(__name__)


class PushDispatcher:
    """Fans a notification out to every device registered for a user.

    Each token gets exactly one send attempt. Sends run concurrently and the
    dispatcher waits for all of them; a failed send is reported in the
    results next to the successful ones.
    """

    def __init__(self, settings: Settings, repository: DeviceRepository, gateway: BasePushGateway) -> None:
        self.settings = settings
        self.repository = repository
        self.gateway = gateway

    def dispatch(self, request: PushNotificationRequest) -> dict[str, Any]:
        if self.gateway.name == "fcm" and not self.settings.fcm_server_key:
            logger.error("FCM server key is not configured")
            raise UpstreamFailure("FCM_SERVER_KEY is not configured")

        if not request.user_id or not request.title or not request.body:
            raise RequestValidationFailed("userId, title and body are required")

        channel = resolve_channel(request.channel_id, (request.data or {}).get("type"))

        try:
            tokens = self.repository.list_tokens(request.user_id)
        except DeviceTokenStoreError as exc:
            logger.error("Device token lookup failed", extra={"user_id": request.user_id, "error": str(exc)})
            raise UpstreamFailure("Device token lookup failed", str(exc)) from exc

        if not tokens:
            logger.info("No device tokens registered", extra={"user_id": request.user_id})
            raise ResourceNotFound("No FCM tokens found for user")

        results = self._send_all(tokens, request, channel)
        sent = sum(1 for item in results if item.success)
        failed = len(results) - sent
        logger.info(
            "Push dispatch finished",
            extra={"user_id": request.user_id, "sent": sent, "failed": failed, "channel": channel},
        )
        return PushDispatchResponse(
            success=True,
            sent=sent,
            failed=failed,
            results=[item.as_response() for item in results],
        ).model_dump()

    def _send_all(
        self,
        tokens: list[DeviceTokenItem],
        request: PushNotificationRequest,
        channel: str,
    ) -> list[DispatchResult]:
        workers = max(1, min(self.settings.push_max_workers, len(tokens)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="push-send") as executor:
            futures = [executor.submit(self._send_one, token, request, channel) for token in tokens]
            return [future.result() for future in futures]

    def _send_one(self, token: DeviceTokenItem, request: PushNotificationRequest, channel: str) -> DispatchResult:
        payload = build_fcm_payload(
            token=token.device_token,
            device_type=token.device_type,
            title=request.title or "",
            body=request.body or "",
            channel=channel,
            data=request.data,
        )
        try:
            result = self.gateway.send(payload)
            return DispatchResult(success=True, token=token.device_token, result=result)
        except Exception as exc:
            logger.warning(
                "Push send failed",
                extra={"token": mask_token(token.device_token), "device_type": token.device_type, "error": str(exc)},
            )
            return DispatchResult(success=False, token=token.device_token, error=str(exc) or "Unknown error")
