from fastapi import Depends, HTTPException
from pymongo.database import Database

from ..database import get_database
from ..models import Doctor
from ..services.crud import build_crud_router, parse_object_id, serialize

router = build_crud_router(
    "doctors",
    Doctor,
    label="Doctor",
    filter_fields=("hospitalId", "specialty"),
    default_sort=[("name", 1)],
)


@router.get("/{doctor_id}/treatments")
def list_doctor_treatments(doctor_id: str, db: Database = Depends(get_database)):
    doctor = db["doctors"].find_one({"_id": parse_object_id(doctor_id)})
    if not doctor:
        raise HTTPException(status_code=404, detail="Doctor not found")
    return [serialize(t) for t in db["doctortreatments"].find({"doctorId": doctor_id})]
