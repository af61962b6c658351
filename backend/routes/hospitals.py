from fastapi import Depends, HTTPException
from pymongo.database import Database

from ..database import get_database
from ..models import Hospital
from ..services.crud import build_crud_router, parse_object_id, serialize

router = build_crud_router(
    "hospitals",
    Hospital,
    label="Hospital",
    filter_fields=("city", "country"),
    default_sort=[("name", 1)],
)


@router.get("/{hospital_id}/doctors")
def list_hospital_doctors(hospital_id: str, db: Database = Depends(get_database)):
    hospital = db["hospitals"].find_one({"_id": parse_object_id(hospital_id)})
    if not hospital:
        raise HTTPException(status_code=404, detail="Hospital not found")
    return [serialize(d) for d in db["doctors"].find({"hospitalId": hospital_id})]


@router.get("/{hospital_id}/treatments")
def list_hospital_treatments(hospital_id: str, db: Database = Depends(get_database)):
    hospital = db["hospitals"].find_one({"_id": parse_object_id(hospital_id)})
    if not hospital:
        raise HTTPException(status_code=404, detail="Hospital not found")
    return [serialize(t) for t in db["hospitaltreatments"].find({"hospitalId": hospital_id})]
