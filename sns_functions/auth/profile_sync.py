from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import requests
from sqlalchemy.exc import SQLAlchemyError

from sns_functions.auth.naver import NaverOAuthClient
from sns_functions.auth.supabase_admin import SupabaseAuthAdmin
from sns_functions.errors import (
    AuthAdminError,
    NaverApiError,
    RequestValidationFailed,
    ResourceNotFound,
    UpstreamFailure,
)
from sns_functions.models.schemas import ProfileSyncResponse, SyncProfileRequest
from sns_functions.storage.repository import ProfileRepository
from sns_functions.utils.lookup import Lookup

logger = logging.getLogger(__name__)

NAVER_PROVIDER = "naver"
DEFAULT_NAME = "User"


def merge_profile(auth_user: dict[str, Any], naver_profile: dict[str, Any] | None) -> dict[str, Any]:
    """Naver API fields win; auth user metadata fills the gaps."""
    naver = naver_profile or {}
    metadata = auth_user.get("user_metadata") or {}
    auth_email = auth_user.get("email") or ""
    return {
        "name": naver.get("name")
        or naver.get("nickname")
        or metadata.get("full_name")
        or metadata.get("name")
        or (auth_email.split("@")[0] if auth_email else "")
        or DEFAULT_NAME,
        "email": naver.get("email") or auth_email,
        "profile_image_url": naver.get("profile_image") or metadata.get("avatar_url"),
        "provider": NAVER_PROVIDER,
    }


class ProfileSyncService:
    def __init__(
        self,
        profiles: ProfileRepository,
        auth_admin: SupabaseAuthAdmin,
        naver_client: NaverOAuthClient,
    ) -> None:
        self.profiles = profiles
        self.auth_admin = auth_admin
        self.naver_client = naver_client

    def _fetch_naver_profile(self, access_token: str | None) -> Lookup[dict[str, Any]]:
        if not access_token:
            return Lookup.miss("no access token supplied")
        try:
            return Lookup.hit(self.naver_client.fetch_profile(access_token))
        except (NaverApiError, requests.RequestException) as exc:
            logger.warning("Naver profile fetch failed, using stored metadata", extra={"error": str(exc)})
            return Lookup.miss(str(exc))

    def sync(self, request: SyncProfileRequest) -> dict[str, Any]:
        if not request.user_id:
            raise RequestValidationFailed("userId is required")

        try:
            auth_user = self.auth_admin.get_user(request.user_id)
        except (AuthAdminError, requests.RequestException) as exc:
            logger.error("Auth user lookup failed", extra={"user_id": request.user_id, "error": str(exc)})
            raise ResourceNotFound("User not found", str(exc)) from exc
        if not auth_user:
            raise ResourceNotFound("User not found")

        provider = (auth_user.get("app_metadata") or {}).get("provider")
        if provider != NAVER_PROVIDER:
            raise RequestValidationFailed("User did not sign in with Naver", provider=provider)

        naver_lookup = self._fetch_naver_profile(request.access_token)
        fields = merge_profile(auth_user, naver_lookup.value if naver_lookup.found else None)

        try:
            profile = self.profiles.upsert(user_id=request.user_id, **fields)
        except SQLAlchemyError as exc:
            logger.error("Profile upsert failed", extra={"user_id": request.user_id, "error": str(exc)})
            raise UpstreamFailure("Failed to save profile", str(exc)) from exc

        if naver_lookup.found and naver_lookup.value:
            self._refresh_user_metadata(request.user_id, fields, naver_lookup.value)

        return ProfileSyncResponse(message="Naver profile synchronized", profile=profile).model_dump()

    def _refresh_user_metadata(self, user_id: str, fields: dict[str, Any], naver_profile: dict[str, Any]) -> None:
        metadata = {
            "full_name": fields["name"],
            "name": fields["name"],
            "avatar_url": fields["profile_image_url"],
            "email": fields["email"],
            "naver_id": naver_profile.get("id"),
            "synced_at": datetime.utcnow().isoformat(),
        }
        if naver_profile.get("nickname"):
            metadata["nickname"] = naver_profile["nickname"]
        try:
            self.auth_admin.update_user(user_id, user_metadata=metadata)
        except (AuthAdminError, requests.RequestException) as exc:
            logger.warning("User metadata refresh failed", extra={"user_id": user_id, "error": str(exc)})
