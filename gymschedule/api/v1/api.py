from fastapi import APIRouter

# Import modular packages directly
from gymschedule.api.v1.endpoints.schedule import router as schedule_router

api_router = APIRouter()

# Schedule module (series, generation and class instances)
api_router.include_router(schedule_router, prefix="/schedule")
