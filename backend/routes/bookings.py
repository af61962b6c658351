from fastapi import Depends, HTTPException
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.database import Database

from ..database import get_database
from ..models import Booking, BookingStatus
from ..services.crud import build_crud_router, parse_object_id, serialize, utcnow

router = build_crud_router(
    "bookings",
    Booking,
    label="Booking",
    filter_fields=("status", "email", "hospitalId", "doctorId"),
)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


@router.patch("/{booking_id}/status")
def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    db: Database = Depends(get_database),
):
    booking = db["bookings"].find_one_and_update(
        {"_id": parse_object_id(booking_id)},
        {"$set": {"status": body.status.value, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return serialize(booking)
