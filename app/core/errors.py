# app/core/errors.py
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

REQUIRED_FIELDS = ("mode", "content")


class RelayError(Exception):
    """所有會轉成 JSON 錯誤回應的例外基底。"""

    status_code: int = 500
    kind: str = "RelayError"

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"error": self.message, "kind": self.kind}
        if self.details is not None:
            content["details"] = self.details
        return content


class InvalidRequest(RelayError):
    """Client-caused: bad method, body or fields."""

    status_code = 400
    kind = "InvalidRequest"


class ConfigurationError(RelayError):
    """Deployment-caused, e.g. the completion credential is not set."""

    status_code = 500
    kind = "ConfigurationError"


class UpstreamError(RelayError):
    """Transport or auth failure talking to the completion service."""

    status_code = 502
    kind = "UpstreamError"

    def __init__(self, message: str, *, upstream_status: Optional[int] = None, details: Any = None):
        super().__init__(message, details=details)
        self.upstream_status = upstream_status

    def to_content(self) -> Dict[str, Any]:
        content = super().to_content()
        if self.upstream_status is not None:
            content["upstreamStatus"] = self.upstream_status
        return content


class MalformedUpstreamResponse(RelayError):
    """The completion service replied, but not with a recoverable JSON object."""

    status_code = 502
    kind = "MalformedUpstreamResponse"

    def __init__(self, message: str, *, raw: Optional[str] = None, details: Any = None):
        super().__init__(message, details=details)
        self.raw = raw

    def to_content(self) -> Dict[str, Any]:
        content = super().to_content()
        if self.raw is not None:
            content["raw"] = self.raw
        return content


def invalid_request_from_validation(errors: List[Dict[str, Any]]) -> InvalidRequest:
    """把 pydantic 的驗證錯誤整理成簡短訊息（不直接回傳 ctx，內含例外物件無法序列化）。"""

    def _loc(e: Dict[str, Any]) -> tuple:
        # FastAPI 的 loc 以 "body" 開頭；model_validate_json 的則沒有
        loc = tuple(e.get("loc", ()))
        return loc[1:] if loc[:1] == ("body",) else loc

    details = [
        {"field": ".".join(str(p) for p in _loc(e)) or "body", "message": e.get("msg", "")}
        for e in errors
    ]
    if any(e.get("type") == "json_invalid" for e in errors):
        return InvalidRequest("Invalid JSON body", details=details)

    fields = []
    for e in errors:
        loc = _loc(e)
        if loc and str(loc[0]) not in fields:
            fields.append(str(loc[0]))
    if not fields:
        return InvalidRequest(
            f"Request body must be a JSON object with fields: {', '.join(REQUIRED_FIELDS)}",
            details=details,
        )
    return InvalidRequest(f"Missing or invalid fields: {', '.join(fields)}", details=details)


def _relay_error_response(exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("{} ({}): {}", exc.kind, exc.status_code, exc.message)
    else:
        logger.warning("{} ({}): {}", exc.kind, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RelayError)
    async def relay_exc_handler(request: Request, exc: RelayError):
        return _relay_error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        # 統一輸出格式；保留 Allow 等標頭（405）
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        return _relay_error_response(invalid_request_from_validation(exc.errors()))

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        resp = await call_next(request)
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        return resp
