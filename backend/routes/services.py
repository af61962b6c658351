from ..models import Service
from ..services.crud import build_crud_router

router = build_crud_router(
    "services",
    Service,
    label="Service",
)
