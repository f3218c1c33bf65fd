"""
Error taxonomy shared by the services and the HTTP layer.

Every error raised from a service is an ``ApiError`` carrying the HTTP status
it maps to. ``register_exception_handlers`` turns them (and FastAPI's own
validation / routing errors) into the uniform envelope::

    {"success": false, "message": "...", "errors": {...} | null}
"""
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from beauty_studio.core.config import settings
from beauty_studio.core.logger import logger


class ApiError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation Error"


class AuthError(ApiError):
    status_code = 401
    default_message = "Unauthorized access"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "This time slot is already booked."


class StoreError(ApiError):
    status_code = 500
    default_message = "Booking store error"


def error_envelope(message: str, errors: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"success": False, "message": message, "errors": errors}


def _server_error_response(exc: Exception) -> JSONResponse:
    # Details only leave the process outside production
    if settings.is_production:
        return JSONResponse(status_code=500, content=error_envelope("Internal Server Error"))

    content = error_envelope(str(exc) or "Internal Server Error")
    content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


def _field_errors(exc: RequestValidationError) -> Dict[str, str]:
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        # drop the "body" / "query" prefix, keep the field name
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        errors[field or "request"] = err.get("msg", "Invalid value")
    return errors


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error(f"🔥 {type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
            return _server_error_response(exc)

        logger.info(f"⚠️ {exc.status_code} {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_envelope(exc.message, exc.errors))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        logger.info(f"⚠️ 400 {request.method} {request.url.path}: {errors}")
        return JSONResponse(status_code=400, content=error_envelope("Validation Error", errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = f"Not found - {request.url.path}"
        return JSONResponse(status_code=exc.status_code, content=error_envelope(message))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR: {exc}")
        return _server_error_response(exc)
