"""Map domain exceptions to HTTP responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from finsight.domain.exceptions import (
    ConflictError,
    DomainException,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
)

STATUS_BY_EXCEPTION = {
    NotFoundError: 404,
    ConflictError: 409,
    UnauthorizedError: 401,
    InvalidRequestError: 400,
}


def _status_for(exc: DomainException) -> int:
    for exc_type, status in STATUS_BY_EXCEPTION.items():
        if isinstance(exc, exc_type):
            return status
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status = _status_for(exc)
    request_id = getattr(request.state, "request_id", "unknown")
    if status >= 500:
        logging.error(f"Unhandled domain error: {exc}", extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    logging.warning(f"{type(exc).__name__}: {exc}", extra={"request_id": request_id, "status": status})
    return JSONResponse(status_code=status, content={"detail": str(exc)})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
