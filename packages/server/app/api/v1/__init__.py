"""
API v1 Router

All tenant-scoped endpoints are prefixed with /tenants/{tenantSlug}.
"""

from fastapi import APIRouter

from sitework_shared.schemas.common import ErrorResponse
from . import activity, contacts, projects, tasks
from .tenants import router_global as tenants_global_router
from .tenants import router_scoped as tenants_scoped_router

router = APIRouter()

# Domain errors share one envelope
ERRORS = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}

# Tenant routes (not tenant-scoped: list, create)
router.include_router(tenants_global_router)

# Tenant routes (tenant-scoped: get, update)
router.include_router(tenants_scoped_router, prefix="/tenants/{tenantSlug}", tags=["Tenants"], responses=ERRORS)

# Include resource routers
router.include_router(projects.router, prefix="/tenants/{tenantSlug}/projects", tags=["Projects"], responses=ERRORS)
router.include_router(tasks.router, prefix="/tenants/{tenantSlug}/tasks", tags=["Tasks"], responses=ERRORS)
router.include_router(contacts.router, prefix="/tenants/{tenantSlug}/contacts", tags=["Contacts"], responses=ERRORS)
router.include_router(activity.router, prefix="/tenants/{tenantSlug}/activity", tags=["Activity"], responses=ERRORS)


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/tenants",
            "/tenants/{tenantSlug}/projects",
            "/tenants/{tenantSlug}/tasks",
            "/tenants/{tenantSlug}/contacts",
            "/tenants/{tenantSlug}/activity",
        ],
    }
