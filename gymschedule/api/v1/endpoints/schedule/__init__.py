"""
Schedule Module - API Endpoints

This module organizes the recurring class schedule:
- Class series: weekly templates with an effective date range (/series)
- Generation of dated classes from the active series (/series/generate)
- Class instances: the concrete, dated classes (/instances)

Cancelling an instance supports two scopes: only that class, or that class
and every later class of its series (which also shortens the series period).
"""

from fastapi import APIRouter

from gymschedule.api.v1.endpoints.schedule import (
    generation,
    series,
    instances
)

router = APIRouter()

# /series/generate se registra antes que /series/{series_id}
router.include_router(generation.router, prefix="/series", tags=["generation"])
router.include_router(series.router, prefix="/series", tags=["series"])
router.include_router(instances.router, prefix="/instances", tags=["instances"])
