from __future__ import annotations

from typing import Any

import requests

from sns_functions.errors import NaverApiError


NAVER_TOKEN_URL = "https://nid.naver.com/oauth2.0/token"
NAVER_PROFILE_URL = "https://openapi.naver.com/v1/nid/me"


class NaverOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def exchange_code(self, code: str, state: str | None = None) -> dict[str, Any]:
        params = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        if state:
            params["state"] = state

        resp = self.session.get(NAVER_TOKEN_URL, params=params, timeout=self.timeout_seconds)
        if not resp.ok:
            raise NaverApiError(f"Naver token request failed: {resp.status_code} - {resp.text}")
        body = resp.json()
        if body.get("error") or not body.get("access_token"):
            reason = body.get("error_description") or body.get("error") or "no access token"
            raise NaverApiError(f"Naver token exchange failed: {reason}")
        return body

    def fetch_profile(self, access_token: str) -> dict[str, Any]:
        """Return the ``response`` block of the Naver profile API."""
        resp = self.session.get(
            NAVER_PROFILE_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=self.timeout_seconds,
        )
        if not resp.ok:
            raise NaverApiError(f"Naver profile request failed: {resp.status_code}")
        body = resp.json()
        if body.get("resultcode") != "00":
            raise NaverApiError(f"Naver profile API error: {body.get('message')}")
        profile = body.get("response") or {}
        if not profile.get("id"):
            raise NaverApiError("Naver profile response has no id")
        return profile
