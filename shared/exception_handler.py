import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from shared.core.exceptions import ServiceError
from shared.helpers.json_response_helper import error_payload
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        return JSONResponse(
            content=error_payload(exc.message, exc.status_code),
            status_code=exc.http_status
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict) and "status_code" in exc.detail:
            content = exc.detail
        else:
            content = error_payload(str(exc.detail), str(exc.status_code))
        return JSONResponse(content=content, status_code=exc.status_code or 400,
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            content=error_payload(str(exc), AppStatusCode.INVALID_INPUT),
            status_code=422
        )

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}")
        return JSONResponse(
            content=error_payload(str(exc), AppStatusCode.OPERATION_FAILED),
            status_code=500
        )
