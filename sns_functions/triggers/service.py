from __future__ import annotations

import logging
from typing import Any

from sns_functions.errors import RequestValidationFailed
from sns_functions.models.schemas import (
    CommentNotificationRequest,
    LikeNotificationRequest,
    NotificationTriggerResponse,
    PushNotificationRequest,
)
from sns_functions.storage.repository import PostRepository, ProfileRepository
from sns_functions.triggers.dispatch_client import DispatchClient
from sns_functions.utils.text import preview

logger = logging.getLogger(__name__)

GENERIC_ACTOR = "Someone"
GENERIC_POST = "your post"


class SelfNotification(Exception):
    """Raised when the actor and the content owner are the same user."""


def like_message(liker_name: str, like_count: int | None) -> str:
    if like_count and like_count > 1:
        return f"{liker_name} and {like_count - 1} others liked your post"
    return f"{liker_name} liked your post"


def comment_message(commenter_name: str, post_preview: str) -> str:
    return f"{commenter_name} left a comment: {post_preview}"


class NotificationTriggerService:
    def __init__(
        self,
        profiles: ProfileRepository,
        posts: PostRepository,
        dispatch_client: DispatchClient,
    ) -> None:
        self.profiles = profiles
        self.posts = posts
        self.dispatch_client = dispatch_client

    def _actor_name(self, user_id: str) -> str:
        lookup = self.profiles.get_name(user_id)
        if not lookup.found:
            logger.warning("Actor profile unavailable", extra={"user_id": user_id, "reason": lookup.reason})
        return lookup.or_default(GENERIC_ACTOR)

    def _post_preview(self, post_id: str) -> str:
        lookup = self.posts.get_content(post_id)
        if not lookup.found:
            logger.warning("Post content unavailable", extra={"post_id": post_id, "reason": lookup.reason})
            return GENERIC_POST
        return preview(lookup.or_default(""))

    def notify_comment(self, request: CommentNotificationRequest) -> dict[str, Any]:
        if not request.post_id or not request.comment_id or not request.commenter_id or not request.post_author_id:
            raise RequestValidationFailed("postId, commentId, commenterId and postAuthorId are required")
        if request.commenter_id == request.post_author_id:
            raise SelfNotification("No notification is sent for comments on your own post")

        commenter_name = self._actor_name(request.commenter_id)
        post_preview = self._post_preview(request.post_id)

        result = self.dispatch_client.send(
            PushNotificationRequest(
                user_id=request.post_author_id,
                title="New comment on your post",
                body=comment_message(commenter_name, post_preview),
                data={
                    "type": "comment",
                    "postId": request.post_id,
                    "commentId": request.comment_id,
                    "commenterId": request.commenter_id,
                },
            )
        )
        return NotificationTriggerResponse(message="Comment notification sent", result=result).model_dump()

    def notify_like(self, request: LikeNotificationRequest) -> dict[str, Any]:
        if not request.post_id or not request.liker_id or not request.post_author_id:
            raise RequestValidationFailed("postId, likerId and postAuthorId are required")
        if request.liker_id == request.post_author_id:
            raise SelfNotification("No notification is sent for likes on your own post")

        liker_name = self._actor_name(request.liker_id)
        count_lookup = self.posts.count_likes(request.post_id)
        like_count = count_lookup.value if count_lookup.found else None

        result = self.dispatch_client.send(
            PushNotificationRequest(
                user_id=request.post_author_id,
                title="Your post got a new like",
                body=like_message(liker_name, like_count),
                data={
                    "type": "like",
                    "postId": request.post_id,
                    "likerId": request.liker_id,
                    "likeCount": like_count or 1,
                },
            )
        )
        return NotificationTriggerResponse(message="Like notification sent", result=result).model_dump()
