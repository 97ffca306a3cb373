"""
Top-level router for version 1 of the API.

Each domain router is mounted under its own prefix.
"""

from fastapi import APIRouter

from .endpoints import (
    auth,
    users,
    employees,
    clients,
    projects,
    service_requests,
    messages,
    service_types,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(employees.router, prefix="/employees", tags=["employees"])
router.include_router(clients.router, prefix="/clients", tags=["clients"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(service_requests.router, prefix="/service-requests", tags=["service-requests"])
router.include_router(messages.router, prefix="/messages", tags=["messages"])
router.include_router(service_types.router, prefix="/service-types", tags=["service-types"])
