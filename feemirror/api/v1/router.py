"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from feemirror.api.v1.endpoints import (
    dashboard, students, outstanding, finance,
    inventory, staff
)

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(outstanding.router, prefix="/outstanding", tags=["Outstanding Fees"])
api_router.include_router(finance.router, tags=["Finance"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])
api_router.include_router(staff.router, prefix="/staff", tags=["Staff"])
