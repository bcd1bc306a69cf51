import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError


logger = logging.getLogger(__name__)


class StudXError(Exception):
    """Base error carrying the HTTP status and the client-visible message."""

    status_code = 500

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(StudXError):
    status_code = 400


class UnauthorizedError(StudXError):
    status_code = 401


class ForbiddenError(StudXError):
    status_code = 403


class NotFoundError(StudXError):
    # also raised for non-participants so that existence is not leaked
    status_code = 404


async def studx_error_handler(request: Request, exc: StudXError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


async def datastore_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.exception("Datastore error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error"})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudXError, studx_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, datastore_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
