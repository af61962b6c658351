from ..models import Heading
from ..services.crud import build_crud_router

router = build_crud_router(
    "headings",
    Heading,
    label="Heading",
    filter_fields=("section", "language"),
)
