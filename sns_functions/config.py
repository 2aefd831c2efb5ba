from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


SUPPORTED_NOTIFICATION_PROVIDERS = {"fcm", "mock"}
DEFAULT_APP_REDIRECT = "com.example.communityapp://callback"


PSYCOPG2_SCHEME = "postgresql+psycopg2"
LOCAL_DB_HOSTS = ("localhost", "127.0.0.1")


def _get_first_set(*env_names: str) -> str:
    """Value of the first env var in ``env_names`` that is non-blank."""
    values = (os.getenv(name, "").strip() for name in env_names)
    return next((value for value in values if value), "")


def _normalize_database_url(raw_url: str) -> str:
    # Supabase hands out bare postgres:// URLs; pin the driver we ship.
    scheme, sep, rest = raw_url.partition("://")
    if sep and scheme in ("postgres", "postgresql"):
        return f"{PSYCOPG2_SCHEME}://{rest}"
    return raw_url


def _with_sslmode_if_needed(db_url: str) -> str:
    if not db_url.startswith("postgresql") or "sslmode=" in db_url:
        return db_url
    if any(host in db_url.lower() for host in LOCAL_DB_HOSTS):
        return db_url
    return f"{db_url}{'&' if '?' in db_url else '?'}sslmode=require"


def _build_database_url() -> str:
    explicit = _get_first_set("DATABASE_URL", "SUPABASE_DB_URL")
    if explicit:
        return _with_sslmode_if_needed(_normalize_database_url(explicit))

    # Local dev fallback when DATABASE_URL is not set.
    sqlite_file = Path(os.getenv("SQLITE_DB_PATH", "./sns_functions.db")).as_posix()
    if sqlite_file.startswith("/"):
        return f"sqlite:///{sqlite_file}"
    return f"sqlite:///./{sqlite_file.lstrip('./')}"


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


@dataclass(frozen=True)
class Settings:
    app_name: str = os.getenv("APP_NAME", "sns_functions")
    app_debug: bool = os.getenv("APP_DEBUG", "false").lower() == "true"

    database_url: str = _build_database_url()
    db_schema: str = _get_first_set("DB_SCHEMA") or "public"

    supabase_url: str = _strip_trailing_slash(os.getenv("SUPABASE_URL", "").strip())
    supabase_service_role_key: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip()

    naver_client_id: str = os.getenv("NAVER_CLIENT_ID", "").strip()
    naver_client_secret: str = os.getenv("NAVER_CLIENT_SECRET", "").strip()
    oauth_default_redirect: str = os.getenv("OAUTH_DEFAULT_REDIRECT", DEFAULT_APP_REDIRECT)
    session_expires_in_seconds: int = int(os.getenv("SESSION_EXPIRES_IN_SECONDS", "3600"))

    notification_provider: str = os.getenv("NOTIFICATION_PROVIDER", "fcm").strip().lower()
    fcm_server_key: str = os.getenv("FCM_SERVER_KEY", "").strip()
    fcm_send_url: str = os.getenv("FCM_SEND_URL", "https://fcm.googleapis.com/fcm/send")
    push_max_workers: int = int(os.getenv("PUSH_MAX_WORKERS", "8"))
    push_dispatch_url: str = os.getenv("PUSH_DISPATCH_URL", "").strip()

    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    def missing_oauth_settings(self) -> list[str]:
        checks = {
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_SERVICE_ROLE_KEY": self.supabase_service_role_key,
            "NAVER_CLIENT_ID": self.naver_client_id,
            "NAVER_CLIENT_SECRET": self.naver_client_secret,
        }
        return [name for name, value in checks.items() if not value]

    def missing_required(self) -> list[str]:
        missing = self.missing_oauth_settings()
        if self.notification_provider not in SUPPORTED_NOTIFICATION_PROVIDERS:
            missing.append(f"NOTIFICATION_PROVIDER (unsupported: {self.notification_provider})")
        if self.notification_provider == "fcm" and not self.fcm_server_key:
            missing.append("FCM_SERVER_KEY")
        return missing


settings = Settings()


def get_settings() -> Settings:
    return settings
