from __future__ import annotations

PREVIEW_MAX_CHARS = 50
ELLIPSIS = "..."


def preview(content: str, max_chars: int = PREVIEW_MAX_CHARS) -> str:
    if len(content) > max_chars:
        return content[:max_chars] + ELLIPSIS
    return content


def truncate(message: str, max_chars: int) -> str:
    return message[:max_chars]


def mask_token(token: str) -> str:
    return f"{token[:12]}…" if len(token) > 12 else token
