import logging

import stripe
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Invalid or missing token"):
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden access"):
        super().__init__(status_code=403, detail=detail)


class BadRequest(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=400, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class PaymentNotCompleted(HTTPException):
    def __init__(self, detail: str = "Payment not completed"):
        super().__init__(status_code=400, detail=detail)


async def storage_failure_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Database operation failed", "error": str(exc)},
    )


async def upstream_failure_handler(request: Request, exc: stripe.StripeError):
    logger.exception("Payment processor failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=502,
        content={"detail": "Payment processor request failed", "error": str(exc)},
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(SQLAlchemyError, storage_failure_handler)
    app.add_exception_handler(stripe.StripeError, upstream_failure_handler)
