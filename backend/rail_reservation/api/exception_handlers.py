"""
Translate engine errors into HTTP responses.

Every BookingError becomes {"detail": message, "code": code} with the error's
status code; the process keeps serving.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rail_reservation.core.exceptions import BookingError
from rail_reservation.core.logging import get_logger

logger = get_logger(__name__)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("booking_error", code=exc.code, detail=exc.message)
    else:
        logger.info("booking_error", code=exc.code, detail=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
