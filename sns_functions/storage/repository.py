from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sns_functions.errors import DeviceTokenStoreError
from sns_functions.models.schemas import DeviceTokenItem, ProfileItem
from sns_functions.models.tables import DeviceToken, Post, PostLike, UserProfile
from sns_functions.utils.lookup import Lookup

logger = logging.getLogger(__name__)


class DeviceRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_tokens(self, user_id: str) -> list[DeviceTokenItem]:
        stmt = (
            select(DeviceToken.device_token, DeviceToken.device_type)
            .where(DeviceToken.user_id == user_id)
            .order_by(DeviceToken.id.asc())
        )
        try:
            rows = self.db.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise DeviceTokenStoreError(str(exc)) from exc
        return [DeviceTokenItem(device_token=row[0], device_type=row[1]) for row in rows]


class ProfileRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_name(self, user_id: str) -> Lookup[str]:
        try:
            row = self.db.get(UserProfile, user_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Profile lookup failed", extra={"user_id": user_id, "error": str(exc)})
            return Lookup.miss(str(exc))
        if row is None or not row.name:
            return Lookup.miss("profile not found")
        return Lookup.hit(row.name)

    def find_id_by_email(self, email: str, provider: str | None = None) -> str | None:
        stmt = select(UserProfile.id).where(UserProfile.email == email)
        if provider:
            stmt = stmt.where(UserProfile.provider == provider)
        return self.db.execute(stmt.limit(1)).scalar_one_or_none()

    def upsert(
        self,
        user_id: str,
        name: str | None,
        email: str | None,
        profile_image_url: str | None,
        provider: str | None,
    ) -> ProfileItem:
        row = self.db.get(UserProfile, user_id)
        if row is None:
            row = UserProfile(
                id=user_id,
                name=name,
                email=email,
                profile_image_url=profile_image_url,
                provider=provider,
                updated_at=datetime.utcnow(),
            )
        else:
            row.name = name
            row.email = email
            row.profile_image_url = profile_image_url
            row.provider = provider
            row.updated_at = datetime.utcnow()
        self.db.add(row)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return ProfileItem(
            id=row.id,
            name=row.name,
            email=row.email,
            profile_image_url=row.profile_image_url,
            provider=row.provider,
        )


class PostRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_content(self, post_id: str) -> Lookup[str]:
        try:
            row = self.db.get(Post, post_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Post lookup failed", extra={"post_id": post_id, "error": str(exc)})
            return Lookup.miss(str(exc))
        if row is None or not row.content:
            return Lookup.miss("post not found")
        return Lookup.hit(row.content)

    def count_likes(self, post_id: str) -> Lookup[int]:
        stmt = select(func.count(PostLike.id)).where(PostLike.post_id == post_id)
        try:
            count = self.db.execute(stmt).scalar_one()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Like count lookup failed", extra={"post_id": post_id, "error": str(exc)})
            return Lookup.miss(str(exc))
        return Lookup.hit(int(count))
