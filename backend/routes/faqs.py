from ..models import Faq
from ..services.crud import build_crud_router

router = build_crud_router(
    "faqs",
    Faq,
    label="FAQ",
    filter_fields=("category",),
    default_sort=[("createdAt", 1)],
)
