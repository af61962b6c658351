from ..models import ProcedureCost
from ..services.crud import build_crud_router

router = build_crud_router(
    "procedurecosts",
    ProcedureCost,
    label="Procedure cost",
    filter_fields=("procedure", "currency"),
)
