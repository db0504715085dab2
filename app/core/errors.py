from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class APIError(Exception):
    def __init__(self, code: str, message: str, status_code: int = 400, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ConfigurationError(APIError):
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__("config_error", message, status_code=500, details=details)


class RemoteFetchError(APIError):
    """Catalog transport failure, non-success status or malformed body."""

    def __init__(self, message: str = "Catalog request failed", details: dict[str, Any] | None = None):
        super().__init__("catalog_fetch_failed", message, status_code=502, details=details)


class InvalidCredentialError(APIError):
    """The catalog rejected the bearer token."""

    def __init__(self, message: str = "TMDB API key is invalid", details: dict[str, Any] | None = None):
        super().__init__("catalog_invalid_credential", message, status_code=502, details=details)


class TrendStoreError(APIError):
    def __init__(self, message: str = "Trend store operation failed", details: dict[str, Any] | None = None):
        super().__init__("trend_store_error", message, status_code=503, details=details)


class SessionNotFoundError(APIError):
    def __init__(self, session_id: str):
        super().__init__("session_not_found", "Search session not found", status_code=404, details={"session_id": session_id})


def _error_payload(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_payload(exc.code, exc.message, exc.details))


async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=_error_payload("internal_error", "Unexpected server error", {"type": exc.__class__.__name__}),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
