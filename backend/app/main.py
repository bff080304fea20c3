"""
PipelineCRM FastAPI Application - Main entry point.

A multi-tenant CRM backend. Every organization is a tenant; its team members
act inside it under the permissions the organization assigns them, and
super-admins manage the permission catalog, plans and organizations.

- Auth: token verification, caller details, super-admin / organization / team
  member login
- Tenancy: organizations, team members, invitations
- Authorization: permission catalog and assignments
- Subscription: plans and payment verification
- CRM: companies, contacts, categories, products, pipelines, stages,
  meetings, leads, notes

Every JSON response, errors included, uses the ``{success, message, data}``
envelope.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import AppError
from app.db.base import init_db
from app.schemas.common import HealthResponse

from app.api.v1 import auth, super_admin, organizations, team_members
from app.api.v1 import permissions, team_member_permissions, plans, payments, static_data, user_details
from app.api.v1.crm import crm_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    # Note: In production, use Alembic migrations instead
    await init_db()
    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="""
PipelineCRM - multi-tenant CRM backend.

## Principals

- **Organization**: tenant owner, allowed every permission inside its tenant
- **Team member**: acts inside its organization with assigned permissions
- **Super admin**: manages plans, permissions and organizations
    """,
    lifespan=lifespan,
    docs_url=f"{settings.API_PREFIX}/docs" if settings.DEBUG else None,
    redoc_url=f"{settings.API_PREFIX}/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get(f"{settings.API_PREFIX}/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
app.include_router(super_admin.router, prefix=f"{settings.API_PREFIX}/super-admin", tags=["super-admin"])
app.include_router(organizations.router, prefix=f"{settings.API_PREFIX}/organization", tags=["organizations"])
app.include_router(team_members.router, prefix=f"{settings.API_PREFIX}/team-member", tags=["team-members"])
app.include_router(permissions.router, prefix=f"{settings.API_PREFIX}/permission", tags=["permissions"])
app.include_router(
    team_member_permissions.router,
    prefix=f"{settings.API_PREFIX}/assign-permission",
    tags=["permissions"]
)
app.include_router(plans.router, prefix=f"{settings.API_PREFIX}/plan", tags=["plans"])
app.include_router(payments.router, prefix=f"{settings.API_PREFIX}/payment", tags=["payments"])
app.include_router(static_data.router, prefix=f"{settings.API_PREFIX}/static", tags=["static"])
app.include_router(user_details.router, prefix=f"{settings.API_PREFIX}/user-details", tags=["auth"])

# CRM module - /api/{lead,company,contact,...}
app.include_router(crm_router, prefix=settings.API_PREFIX)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

def envelope(status_code: int, message: str, data=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "data": jsonable_encoder(data)},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return envelope(exc.status_code, exc.message, exc.data)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return envelope(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return envelope(400, "Validation error", exc.errors())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler. Error text is shown only in non-production debug runs."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.DEBUG and settings.APP_ENV != "production":
        return envelope(500, str(exc))
    return envelope(500, "Internal server error")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
