"""
Static lookup data for clients.
"""
from fastapi import APIRouter, Depends

from app.core.deps import get_current_principal
from app.core.identity import Principal
from app.schemas.common import Envelope, ok

router = APIRouter()

# Modules a permission name may refer to (``<module>.<action>``).
MODULES = [
    "contact",
    "category",
    "company",
    "lead",
    "meeting",
    "pipeline",
    "product",
    "stage",
    "note",
]


@router.get("/modules", response_model=Envelope[list[str]])
async def list_modules(principal: Principal = Depends(get_current_principal)):
    return ok(MODULES, "Modules fetched successfully")
