from ..models import Collection
from ..services.crud import build_crud_router

router = build_crud_router(
    "collections",
    Collection,
    label="Collection",
)
