from __future__ import annotations

from typing import Any


class FunctionError(Exception):
    """An error that maps onto a function's JSON failure response."""

    status_code: int = 500

    def __init__(self, error: str, details: str | None = None, status_code: int | None = None, **extra: Any) -> None:
        super().__init__(error if details is None else f"{error}: {details}")
        self.error = error
        self.details = details
        self.extra = extra
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body


class RequestValidationFailed(FunctionError):
    status_code = 400


class ResourceNotFound(FunctionError):
    status_code = 404


class UpstreamFailure(FunctionError):
    status_code = 500


class PushGatewayError(RuntimeError):
    def __init__(self, status_code: int, body_text: str) -> None:
        super().__init__(f"FCM request failed: {status_code} - {body_text}")
        self.status_code = status_code
        self.body_text = body_text


class DeviceTokenStoreError(RuntimeError):
    pass


class DispatchFailedError(RuntimeError):
    def __init__(self, status_code: int, body_text: str) -> None:
        super().__init__(f"Push notification failed: {status_code} - {body_text}")
        self.status_code = status_code
        self.body_text = body_text


class AuthAdminError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NaverApiError(RuntimeError):
    pass
