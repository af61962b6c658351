from ..models import Treatment
from ..services.crud import build_crud_router

router = build_crud_router(
    "treatments",
    Treatment,
    label="Treatment",
    filter_fields=("category",),
    default_sort=[("name", 1)],
)
