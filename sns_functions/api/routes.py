from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import RedirectResponse

from sns_functions.api.dependencies import (
    get_callback_service,
    get_profile_sync_service,
    get_push_dispatcher,
    get_trigger_service,
)
from sns_functions.api.responses import json_response, preflight_response
from sns_functions.auth.callback import NaverCallbackService
from sns_functions.auth.profile_sync import ProfileSyncService
from sns_functions.errors import DispatchFailedError, FunctionError, UpstreamFailure
from sns_functions.models.schemas import (
    CommentNotificationRequest,
    LikeNotificationRequest,
    PushNotificationRequest,
    SyncProfileRequest,
)
from sns_functions.notifications.service import PushDispatcher
from sns_functions.triggers.service import NotificationTriggerService, SelfNotification

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/functions/v1", tags=["functions"])

FUNCTION_NAMES = (
    "send-push-notification",
    "send-comment-notification",
    "send-like-notification",
    "naver-auth-callback",
    "sync-naver-profile",
)


def _preflight():
    return preflight_response()


for _name in FUNCTION_NAMES:
    router.add_api_route(f"/{_name}", _preflight, methods=["OPTIONS"], include_in_schema=False)


@router.post("/send-push-notification")
def send_push_notification(
    payload: PushNotificationRequest | None = Body(default=None),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
):
    try:
        return json_response(dispatcher.dispatch(payload or PushNotificationRequest()))
    except FunctionError:
        raise
    except Exception as exc:
        logger.exception("Push notification failed", extra={"error": str(exc)})
        raise UpstreamFailure("Push notification failed", str(exc)) from exc


@router.post("/send-comment-notification")
def send_comment_notification(
    payload: CommentNotificationRequest | None = Body(default=None),
    service: NotificationTriggerService = Depends(get_trigger_service),
):
    try:
        return json_response(service.notify_comment(payload or CommentNotificationRequest()))
    except SelfNotification as exc:
        return json_response({"message": str(exc)})
    except FunctionError:
        raise
    except DispatchFailedError as exc:
        logger.error("Comment notification dispatch failed", extra={"status": exc.status_code, "error": exc.body_text})
        raise UpstreamFailure("Comment notification failed", str(exc)) from exc
    except Exception as exc:
        logger.exception("Comment notification failed", extra={"error": str(exc)})
        raise UpstreamFailure("Comment notification failed", str(exc)) from exc


@router.post("/send-like-notification")
def send_like_notification(
    payload: LikeNotificationRequest | None = Body(default=None),
    service: NotificationTriggerService = Depends(get_trigger_service),
):
    try:
        return json_response(service.notify_like(payload or LikeNotificationRequest()))
    except SelfNotification as exc:
        return json_response({"message": str(exc)})
    except FunctionError:
        raise
    except DispatchFailedError as exc:
        logger.error("Like notification dispatch failed", extra={"status": exc.status_code, "error": exc.body_text})
        raise UpstreamFailure("Like notification failed", str(exc)) from exc
    except Exception as exc:
        logger.exception("Like notification failed", extra={"error": str(exc)})
        raise UpstreamFailure("Like notification failed", str(exc)) from exc


@router.get("/naver-auth-callback")
def naver_auth_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    redirect_to: str | None = Query(default=None),
    error: str | None = Query(default=None),
    error_description: str | None = Query(default=None),
    service: NaverCallbackService = Depends(get_callback_service),
):
    url = service.handle(
        code=code,
        state=state,
        redirect_to=redirect_to,
        error=error,
        error_description=error_description,
    )
    return RedirectResponse(url=url, status_code=302)


@router.post("/sync-naver-profile")
def sync_naver_profile(
    payload: SyncProfileRequest | None = Body(default=None),
    service: ProfileSyncService = Depends(get_profile_sync_service),
):
    try:
        return json_response(service.sync(payload or SyncProfileRequest()))
    except FunctionError:
        raise
    except Exception as exc:
        logger.exception("Naver profile sync failed", extra={"error": str(exc)})
        raise UpstreamFailure("Naver profile sync failed", str(exc)) from exc
