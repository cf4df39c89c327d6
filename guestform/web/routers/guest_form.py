"""
Guest form HTTP API.

Every response uses the same JSON envelope:
{"success": bool, "data"?: ..., "message"?: str, "error"?: str}
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from guestform.core.config import settings
from guestform.core.rate_limiter import limiter
from guestform.database import get_db
from guestform.repositories.booking_repository import SqlAlchemyBookingRepository
from guestform.schemas.booking import (
    BookedDateRangeOut,
    BookingOut,
    CancelBookingRequest,
    CleanupRequest,
    ConflictOut,
)
from guestform.services.booking_service import BookingService, UploadedFile, parse_submission
from guestform.services.errors import BookingConflictError, BookingError

router = APIRouter(tags=["guest-form"])
logger = logging.getLogger(__name__)


async def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(SqlAlchemyBookingRepository(db))


def ok(data=None, message: Optional[str] = None) -> JSONResponse:
    content = {"success": True}
    if data is not None:
        content["data"] = data
    if message:
        content["message"] = message
    return JSONResponse(status_code=200, content=content)


def fail(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error, **extra})


def error_response(exc: Exception, action: str) -> JSONResponse:
    """Map service exceptions onto the envelope"""
    if isinstance(exc, BookingConflictError):
        conflicts = [
            ConflictOut.model_validate(c).model_dump(by_alias=True) for c in exc.conflicts
        ]
        return fail(exc.status_code, str(exc), conflicts=conflicts)
    if isinstance(exc, BookingError):
        return fail(exc.status_code, str(exc))

    logger.error(f"❌ Error in {action}: {exc}", exc_info=True)
    return fail(400, str(exc) or "Unknown error occurred")


async def read_json(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


async def split_form(request: Request) -> tuple[dict, dict]:
    """Multipart form -> (text fields, uploaded files by field name)"""
    form = await request.form()
    fields, files = {}, {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            content = await value.read()
            if value.filename and content:
                files[key] = UploadedFile(filename=value.filename, content=content)
        else:
            fields[key] = value
    return fields, files


@router.post("/submit-form")
@limiter.limit(settings.rate_limit_submit)
async def submit_form(
    request: Request,
    service: BookingService = Depends(get_booking_service),
):
    """
    Create or update a guest form submission.

    A bookingId (query string or form field) turns the call into an update of
    that booking; files left out of an update keep their stored URLs.
    """
    try:
        fields, files = await split_form(request)
        booking_id = request.query_params.get("bookingId") or fields.pop("bookingId", None) or None

        form = parse_submission(fields)
        result = await service.submit(form, files, booking_id=booking_id)
    except Exception as e:
        return error_response(e, "submit-form")

    booking = BookingOut.model_validate(result.booking).model_dump(mode="json")
    return ok(
        {**booking, "isUpdate": result.is_update, "integrations": result.mirrors},
        message="Guest form updated" if result.is_update else "Guest form submitted",
    )


@router.get("/get-form/{booking_id}")
async def get_form(booking_id: str, service: BookingService = Depends(get_booking_service)):
    try:
        form = await service.get_form(booking_id)
    except Exception as e:
        return error_response(e, "get-form")
    return ok(form.model_dump(by_alias=True))


@router.get("/get-booked-dates")
async def get_booked_dates(service: BookingService = Depends(get_booking_service)):
    try:
        ranges = await service.booked_dates()
    except Exception as e:
        return error_response(e, "get-booked-dates")
    return ok([BookedDateRangeOut.model_validate(r).model_dump(by_alias=True) for r in ranges])


@router.post("/cancel-booking")
async def cancel_booking(request: Request, service: BookingService = Depends(get_booking_service)):
    try:
        payload = CancelBookingRequest.model_validate(await read_json(request))
        summary = await service.cancel(payload.booking_id, payload.confirm)
    except Exception as e:
        return error_response(e, "cancel-booking")
    return ok(summary, message=f"Booking {summary['bookingId']} canceled")


@router.post("/cleanup-test-data")
async def cleanup_test_data(request: Request, service: BookingService = Depends(get_booking_service)):
    try:
        payload = CleanupRequest.model_validate(await read_json(request))
        summary = await service.cleanup_test_data(payload.confirm)
    except Exception as e:
        return error_response(e, "cleanup-test-data")
    return ok(summary, message="Test data cleanup completed")
