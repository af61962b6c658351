from ..models import Patient
from ..services.crud import build_crud_router

router = build_crud_router(
    "patients",
    Patient,
    label="Patient",
    filter_fields=("email", "country"),
)
