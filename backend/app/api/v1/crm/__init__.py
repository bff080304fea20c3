"""
CRM module API routers.

Every resource is tenant-scoped and guarded by ``<module>.<action>``
permissions:
- Companies, Contacts
- Categories, Products
- Pipelines, Stages
- Meetings, Leads, Notes
"""
from fastapi import APIRouter

from app.api.v1.crm.companies import router as companies_router
from app.api.v1.crm.contacts import router as contacts_router
from app.api.v1.crm.categories import router as categories_router
from app.api.v1.crm.products import router as products_router
from app.api.v1.crm.pipelines import router as pipelines_router
from app.api.v1.crm.stages import router as stages_router
from app.api.v1.crm.meetings import router as meetings_router
from app.api.v1.crm.leads import router as leads_router
from app.api.v1.crm.notes import router as notes_router

crm_router = APIRouter(tags=["crm"])

crm_router.include_router(companies_router, prefix="/company")
crm_router.include_router(contacts_router, prefix="/contact")
crm_router.include_router(categories_router, prefix="/category")
crm_router.include_router(products_router, prefix="/product")
crm_router.include_router(pipelines_router, prefix="/pipeline")
crm_router.include_router(stages_router, prefix="/stage")
crm_router.include_router(meetings_router, prefix="/meeting")
crm_router.include_router(leads_router, prefix="/lead")
crm_router.include_router(notes_router, prefix="/note")

__all__ = ["crm_router"]
