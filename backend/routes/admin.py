from fastapi import APIRouter, Depends
from pymongo.database import Database

from ..database import get_database
from ..models import Admin
from ..services.crud import build_crud_router

# colecciones que aparecen en el resumen del panel de administración
SUMMARY_COLLECTIONS = (
    "hospitals",
    "doctors",
    "treatments",
    "bookings",
    "blogs",
    "faqs",
    "patientopinions",
    "patients",
)

router = APIRouter()


# antes que el CRUD, si no GET /{id} se queda con "summary"
@router.get("/summary")
def get_summary(db: Database = Depends(get_database)):
    counts = {name: db[name].count_documents({}) for name in SUMMARY_COLLECTIONS}
    pending = db["bookings"].count_documents({"status": "pending"})
    return {"counts": counts, "pendingBookings": pending}


build_crud_router("admins", Admin, label="Admin", filter_fields=("role",), router=router)
