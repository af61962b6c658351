from ..models import Assistance
from ..services.crud import build_crud_router

router = build_crud_router(
    "assistances",
    Assistance,
    label="Assistance entry",
)
