from ..models import DoctorTreatment
from ..services.crud import build_crud_router

router = build_crud_router(
    "doctortreatments",
    DoctorTreatment,
    label="Doctor treatment",
    filter_fields=("doctorId", "treatmentId"),
)
