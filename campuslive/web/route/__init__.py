"""Route aggregation for the realtime web application."""

from fastapi import APIRouter

from . import health, realtime

router = APIRouter()
router.include_router(health.router)
router.include_router(realtime.router)
