from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from sns_functions.auth.callback import NaverCallbackService
from sns_functions.auth.naver import NaverOAuthClient
from sns_functions.auth.profile_sync import ProfileSyncService
from sns_functions.auth.supabase_admin import SupabaseAuthAdmin
from sns_functions.config import Settings
from sns_functions.models.db import get_db_session
from sns_functions.notifications.providers import BasePushGateway, build_gateway
from sns_functions.notifications.service import PushDispatcher
from sns_functions.storage.repository import DeviceRepository, PostRepository, ProfileRepository
from sns_functions.triggers.dispatch_client import DispatchClient, LocalDispatchClient, RemoteDispatchClient
from sns_functions.triggers.service import NotificationTriggerService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_push_gateway(settings: Settings = Depends(get_app_settings)) -> BasePushGateway:
    return build_gateway(settings)


def get_auth_admin(settings: Settings = Depends(get_app_settings)) -> SupabaseAuthAdmin:
    return SupabaseAuthAdmin(
        base_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
        timeout_seconds=settings.http_timeout_seconds,
    )


def get_naver_client(settings: Settings = Depends(get_app_settings)) -> NaverOAuthClient:
    return NaverOAuthClient(
        client_id=settings.naver_client_id,
        client_secret=settings.naver_client_secret,
        timeout_seconds=settings.http_timeout_seconds,
    )


def get_push_dispatcher(
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db_session),
    gateway: BasePushGateway = Depends(get_push_gateway),
) -> PushDispatcher:
    return PushDispatcher(settings=settings, repository=DeviceRepository(db=db), gateway=gateway)


def get_dispatch_client(
    settings: Settings = Depends(get_app_settings),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> DispatchClient:
    if settings.push_dispatch_url:
        return RemoteDispatchClient(
            url=settings.push_dispatch_url,
            service_role_key=settings.supabase_service_role_key,
            timeout_seconds=settings.http_timeout_seconds,
        )
    return LocalDispatchClient(dispatcher)


def get_trigger_service(
    db: Session = Depends(get_db_session),
    dispatch_client: DispatchClient = Depends(get_dispatch_client),
) -> NotificationTriggerService:
    return NotificationTriggerService(
        profiles=ProfileRepository(db=db),
        posts=PostRepository(db=db),
        dispatch_client=dispatch_client,
    )


def get_callback_service(
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db_session),
    naver_client: NaverOAuthClient = Depends(get_naver_client),
    auth_admin: SupabaseAuthAdmin = Depends(get_auth_admin),
) -> NaverCallbackService:
    return NaverCallbackService(
        settings=settings,
        profiles=ProfileRepository(db=db),
        naver_client=naver_client,
        auth_admin=auth_admin,
    )


def get_profile_sync_service(
    db: Session = Depends(get_db_session),
    naver_client: NaverOAuthClient = Depends(get_naver_client),
    auth_admin: SupabaseAuthAdmin = Depends(get_auth_admin),
) -> ProfileSyncService:
    return ProfileSyncService(profiles=ProfileRepository(db=db), auth_admin=auth_admin, naver_client=naver_client)
