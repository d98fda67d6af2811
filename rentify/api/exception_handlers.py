"""Map domain exceptions to the standard error body."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rentify.errors import DomainError
from rentify.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    body = ErrorResponse(detail=str(exc), code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    # Handlers are looked up along the MRO, so one registration covers every subclass.
    app.add_exception_handler(DomainError, domain_error_handler)
