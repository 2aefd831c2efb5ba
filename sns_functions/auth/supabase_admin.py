from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from sns_functions.errors import AuthAdminError

logger = logging.getLogger(__name__)


class SupabaseAuthAdmin:
    """Thin client for the backend's auth admin REST API (service-role only)."""

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_role_key = service_role_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _user_url(self, user_id: str) -> str:
        return f"{self.base_url}/auth/v1/admin/users/{quote(user_id, safe='')}"

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        resp = self.session.get(self._user_url(user_id), headers=self._headers, timeout=self.timeout_seconds)
        if resp.status_code == 404:
            return None
        if not resp.ok:
            raise AuthAdminError(f"User lookup failed: {resp.status_code} - {resp.text}", resp.status_code)
        return resp.json()

    def list_users(self, page: int = 1, per_page: int = 200) -> list[dict[str, Any]]:
        resp = self.session.get(
            f"{self.base_url}/auth/v1/admin/users",
            headers=self._headers,
            params={"page": page, "per_page": per_page},
            timeout=self.timeout_seconds,
        )
        if not resp.ok:
            raise AuthAdminError(f"User listing failed: {resp.status_code} - {resp.text}", resp.status_code)
        body = resp.json()
        return body.get("users", []) if isinstance(body, dict) else list(body)

    def find_user_by_email(self, email: str, per_page: int = 200, max_pages: int = 50) -> dict[str, Any] | None:
        target = email.strip().lower()
        for page in range(1, max_pages + 1):
            users = self.list_users(page=page, per_page=per_page)
            for user in users:
                if (user.get("email") or "").lower() == target:
                    return user
            if len(users) < per_page:
                return None
        return None

    def create_user(
        self,
        email: str,
        user_metadata: dict[str, Any],
        app_metadata: dict[str, Any],
    ) -> dict[str, Any]:
        resp = self.session.post(
            f"{self.base_url}/auth/v1/admin/users",
            headers=self._headers,
            json={
                "email": email,
                "email_confirm": True,
                "user_metadata": user_metadata,
                "app_metadata": app_metadata,
            },
            timeout=self.timeout_seconds,
        )
        if not resp.ok:
            raise AuthAdminError(f"User creation failed: {resp.status_code} - {resp.text}", resp.status_code)
        return resp.json()

    def update_user(
        self,
        user_id: str,
        user_metadata: dict[str, Any] | None = None,
        app_metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if user_metadata is not None:
            body["user_metadata"] = user_metadata
        if app_metadata is not None:
            body["app_metadata"] = app_metadata
        resp = self.session.put(self._user_url(user_id), headers=self._headers, json=body, timeout=self.timeout_seconds)
        if not resp.ok:
            raise AuthAdminError(f"User update failed: {resp.status_code} - {resp.text}", resp.status_code)
        return resp.json()

    def issue_session(self, user_id: str, expires_in: int = 3600) -> dict[str, Any]:
        resp = self.session.post(
            f"{self._user_url(user_id)}/token",
            headers=self._headers,
            json={"expires_in": expires_in},
            timeout=self.timeout_seconds,
        )
        if not resp.ok:
            logger.error(
                "Session token issuance rejected",
                extra={"user_id": user_id, "status": resp.status_code, "error": resp.text},
            )
            raise AuthAdminError(f"Status {resp.status_code}, Error: {resp.text}", resp.status_code)
        return resp.json()
