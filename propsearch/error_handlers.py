import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import AppError
from .logging_config import get_request_id

logger = logging.getLogger(__name__)


def _body(code: str, message: str, **extra) -> dict:
    return {"error": code, "message": message, "request_id": get_request_id(), **extra}


def init_error_handlers(app):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.error("%s(code=%s): %s", exc.__class__.__name__, exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_body(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.error("ValidationError on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=422,
            content=_body("VALIDATION_ERROR", "Invalid payload", details=jsonable_encoder(exc.errors())),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s", request.url.path)
        return JSONResponse(status_code=500, content=_body("INTERNAL_ERROR", "An unexpected error occurred"))
