"""Aggregate all v1 sub-routers."""

from fastapi import APIRouter

from clickid_service.api.v1.health import router as health_router

api_v1_router = APIRouter()

api_v1_router.include_router(health_router, tags=["health"])
