from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse, PlainTextResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def json_response(body: dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code, headers=CORS_HEADERS)


def preflight_response() -> PlainTextResponse:
    return PlainTextResponse("ok", status_code=200, headers=CORS_HEADERS)
