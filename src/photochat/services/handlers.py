"""Maps core errors and malformed requests to HTTP responses.

Error body: { "error": { "code": "E_...", "message": "..." } }
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from photochat.core.exceptions import CoreError, ErrorCode

logger = logging.getLogger(__name__)

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.E_INVALID_REQUEST: 400,
    ErrorCode.E_CONVERSATION_MISMATCH: 400,
    ErrorCode.E_FORBIDDEN: 403,
    ErrorCode.E_NOT_FOUND: 404,
    ErrorCode.E_CONFLICT: 409,
    ErrorCode.E_INTERNAL: 500,
}


def error_response(code: ErrorCode, message: str) -> dict:
    return {"error": {"code": code.value, "message": message}}


async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    status_code = ERROR_CODE_TO_STATUS.get(exc.code, 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code.value, exc.message)
    return JSONResponse(status_code=status_code, content=error_response(exc.code, exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("%s %s invalid request body: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content=error_response(ErrorCode.E_INVALID_REQUEST, "Invalid request body")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CoreError, core_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
