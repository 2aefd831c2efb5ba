from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class PushNotificationRequest(CamelModel):
    user_id: str | None = Field(default=None, alias="userId")
    title: str | None = None
    body: str | None = None
    channel_id: str | None = Field(default=None, alias="channelId")
    data: dict[str, Any] | None = None


class CommentNotificationRequest(CamelModel):
    post_id: str | None = Field(default=None, alias="postId")
    comment_id: str | None = Field(default=None, alias="commentId")
    commenter_id: str | None = Field(default=None, alias="commenterId")
    post_author_id: str | None = Field(default=None, alias="postAuthorId")


class LikeNotificationRequest(CamelModel):
    post_id: str | None = Field(default=None, alias="postId")
    liker_id: str | None = Field(default=None, alias="likerId")
    post_author_id: str | None = Field(default=None, alias="postAuthorId")


class SyncProfileRequest(CamelModel):
    user_id: str | None = Field(default=None, alias="userId")
    access_token: str | None = Field(default=None, alias="accessToken")


class DeviceTokenItem(BaseModel):
    device_token: str
    device_type: str


class DispatchResult(BaseModel):
    success: bool
    token: str
    result: Any = None
    error: str | None = None

    def as_response(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "token": self.token, "result": self.result}
        return {"success": False, "token": self.token, "error": self.error}


class PushDispatchResponse(BaseModel):
    success: bool = True
    sent: int
    failed: int
    results: list[dict[str, Any]] = Field(default_factory=list)


class ProfileItem(BaseModel):
    id: str
    name: str | None = None
    email: str | None = None
    profile_image_url: str | None = None
    provider: str | None = None


class ProfileSyncResponse(BaseModel):
    success: bool = True
    message: str
    profile: ProfileItem


class NotificationTriggerResponse(BaseModel):
    success: bool = True
    message: str
    result: dict[str, Any]
