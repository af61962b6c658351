from ..models import HospitalTreatment
from ..services.crud import build_crud_router

router = build_crud_router(
    "hospitaltreatments",
    HospitalTreatment,
    label="Hospital treatment",
    filter_fields=("hospitalId", "treatmentId"),
)
