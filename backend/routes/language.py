from ..models import Language
from ..services.crud import build_crud_router

router = build_crud_router(
    "languages",
    Language,
    label="Language",
    filter_fields=("code",),
    default_sort=[("code", 1)],
)
