"""API routers for the HydroWatch backend."""
from fastapi import APIRouter

from . import alerts, apikeys, dams, groundwater, health, notifications, rainfall, river, users


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(users.router)
    api_router.include_router(apikeys.router)
    api_router.include_router(alerts.router)
    api_router.include_router(river.router)
    api_router.include_router(dams.router)
    api_router.include_router(groundwater.router)
    api_router.include_router(rainfall.router)
    api_router.include_router(notifications.router)
    return api_router
