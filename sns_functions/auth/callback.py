from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import requests

from sns_functions.auth.naver import NaverOAuthClient
from sns_functions.auth.supabase_admin import SupabaseAuthAdmin
from sns_functions.config import Settings
from sns_functions.errors import AuthAdminError, NaverApiError
from sns_functions.storage.repository import ProfileRepository
from sns_functions.utils.text import truncate

logger = logging.getLogger(__name__)

ERROR_MESSAGE_MAX_CHARS = 100
NAVER_PROVIDER = "naver"


class CallbackAbort(Exception):
    """Ends the callback early with an error redirect."""


def build_redirect_url(
    base_url: str,
    error: str | None = None,
    user_id: str | None = None,
    access_token: str | None = None,
    refresh_token: str | None = None,
) -> str:
    if error is not None:
        query = urlencode({"error": truncate(error, ERROR_MESSAGE_MAX_CHARS)})
    else:
        params = {"success": "true"}
        if user_id:
            params["user_id"] = user_id
        if access_token:
            params["access_token"] = access_token
        if refresh_token:
            params["refresh_token"] = refresh_token
        query = urlencode(params)
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{query}"


def profile_fields(naver_user: dict[str, Any]) -> dict[str, Any]:
    email = naver_user.get("email") or f"{naver_user['id']}@naver.oauth.dummy"
    return {
        "name": naver_user.get("name") or naver_user.get("nickname") or email.split("@")[0],
        "email": email,
        "profile_image_url": naver_user.get("profile_image"),
        "provider": NAVER_PROVIDER,
    }


class NaverCallbackService:
    """Completes a Naver login and always answers with a deep-link redirect URL."""

    def __init__(
        self,
        settings: Settings,
        profiles: ProfileRepository,
        naver_client: NaverOAuthClient,
        auth_admin: SupabaseAuthAdmin,
    ) -> None:
        self.settings = settings
        self.profiles = profiles
        self.naver_client = naver_client
        self.auth_admin = auth_admin

    def handle(
        self,
        code: str | None,
        state: str | None,
        redirect_to: str | None = None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> str:
        base_url = redirect_to or self.settings.oauth_default_redirect
        try:
            user_id, tokens = self._complete_login(code, state, error, error_description)
        except CallbackAbort as exc:
            message = str(exc)
            logger.error("Naver login aborted", extra={"error": truncate(message, ERROR_MESSAGE_MAX_CHARS)})
            return build_redirect_url(base_url, error=message)
        except Exception as exc:
            logger.exception("Naver login failed unexpectedly", extra={"error": str(exc)})
            return build_redirect_url(base_url, error=str(exc) or "Unknown server error")

        return build_redirect_url(
            base_url,
            user_id=user_id,
            access_token=tokens.get("access_token"),
            refresh_token=tokens.get("refresh_token"),
        )

    def _complete_login(
        self,
        code: str | None,
        state: str | None,
        error: str | None,
        error_description: str | None,
    ) -> tuple[str, dict[str, Any]]:
        missing = self.settings.missing_oauth_settings()
        if missing:
            raise CallbackAbort(f"Missing server configuration: {', '.join(missing)}")

        if error:
            raise CallbackAbort(f"Naver login error: {error_description or error}")
        if not code:
            raise CallbackAbort("Missing authorization code")

        try:
            naver_tokens = self.naver_client.exchange_code(code, state)
            naver_user = self.naver_client.fetch_profile(naver_tokens["access_token"])
        except NaverApiError as exc:
            raise CallbackAbort(str(exc)) from exc

        fields = profile_fields(naver_user)
        try:
            user_id = self._ensure_user(fields, naver_user)
        except AuthAdminError as exc:
            raise CallbackAbort(f"User provisioning failed: {exc}") from exc

        self.profiles.upsert(user_id=user_id, **fields)

        try:
            tokens = self.auth_admin.issue_session(user_id, expires_in=self.settings.session_expires_in_seconds)
        except AuthAdminError as exc:
            raise CallbackAbort(f"Token issuance failed: {exc}") from exc
        except requests.RequestException as exc:
            raise CallbackAbort(f"Token request failed: {exc}") from exc

        logger.info("Naver login completed", extra={"user_id": user_id})
        return user_id, tokens

    def _ensure_user(self, fields: dict[str, Any], naver_user: dict[str, Any]) -> str:
        user_id = self.profiles.find_id_by_email(fields["email"], provider=NAVER_PROVIDER)
        if user_id:
            return user_id

        existing = self.auth_admin.find_user_by_email(fields["email"])
        if existing:
            return existing["id"]

        created = self.auth_admin.create_user(
            email=fields["email"],
            user_metadata={
                "full_name": fields["name"],
                "name": fields["name"],
                "avatar_url": fields["profile_image_url"],
                "naver_id": naver_user["id"],
            },
            app_metadata={"provider": NAVER_PROVIDER, "providers": [NAVER_PROVIDER]},
        )
        logger.info("Created auth user for Naver login", extra={"user_id": created.get("id")})
        return created["id"]
