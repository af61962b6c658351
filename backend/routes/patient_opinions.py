from ..models import PatientOpinion
from ..services.crud import build_crud_router

router = build_crud_router(
    "patientopinions",
    PatientOpinion,
    label="Patient opinion",
    filter_fields=("country",),
)
