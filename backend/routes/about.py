from ..models import About
from ..services.crud import build_crud_router

router = build_crud_router(
    "about",
    About,
    label="About section",
)
