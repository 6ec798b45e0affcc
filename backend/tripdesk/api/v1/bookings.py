"""Booking rating: store the rating, then ask update-vendor-ratings to
recompute the vendor average."""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripdesk.core.deps import get_current_user, oauth2_scheme
from tripdesk.db.session import get_session
from tripdesk.models.booking import Booking
from tripdesk.schemas.booking import BookingRatingOut, BookingRatingUpdate
from tripdesk.services.functions import FunctionError, FunctionsClient, get_functions_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/{booking_id}/rating", response_model=BookingRatingOut, summary="Rate a booking's vendor (1-5)")
async def rate_booking(
    booking_id: uuid.UUID,
    body: BookingRatingUpdate,
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[object, Depends(get_current_user)],
    functions: Annotated[FunctionsClient, Depends(get_functions_client)],
):
    booking = (await db.execute(select(Booking).where(Booking.id == booking_id))).scalar_one_or_none()
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found.")

    booking.rating = body.rating
    await db.commit()

    try:
        summary = await functions.update_vendor_rating(token, booking.vendor_id)
    except FunctionError as exc:
        # The booking rating is saved; only the vendor average is stale.
        logger.error("Vendor %s rating refresh failed: %s", booking.vendor_id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Rating saved, but the vendor rating could not be updated: {exc}",
        )

    return BookingRatingOut(
        booking_id=booking.id,
        vendor_id=booking.vendor_id,
        rating=body.rating,
        vendor_rating=summary.get("rating"),
        rated_bookings=summary.get("bookings_count"),
    )
