from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from youthsync.services.errors import StorageError, ValidationError
from youthsync.utils.logging import get_logger

logger = get_logger(__name__)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_response(
    status_code: int,
    code: str,
    message: str,
    fields: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    error = {"code": code, "message": message}
    if fields:
        error["fields"] = fields
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "generated_at": _now_iso()},
    )


def add_error_handlers(app: FastAPI):
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return error_response(
            422,
            "VALIDATION_ERROR",
            str(exc),
            fields=exc.fields,
        )

    # Bodies FastAPI rejects before the route runs: malformed JSON, arrays, scalars.
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        invalid_json = any(err.get("type") == "json_invalid" for err in exc.errors())
        reason = "is not valid JSON" if invalid_json else "must be a JSON object"
        error = ValidationError({"body": reason})
        return error_response(422, "VALIDATION_ERROR", str(error), fields=error.fields)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, "STORAGE_ERROR", str(exc)
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", str(exc)
        )
