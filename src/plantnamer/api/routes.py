"""API route registration."""

from fastapi import APIRouter

from plantnamer.api.handlers.health import router as health_router
from plantnamer.api.handlers.name import router as name_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(name_router, tags=["name"])
