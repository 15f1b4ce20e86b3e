"""
Common imports and dependencies for the schedule module.

This module centralizes shared imports and dependencies used across
all schedule-related endpoints: database access, models, services and
schemas. Importing from this module keeps the schedule endpoints
consistent and avoids repeating the same import block in every file.
"""

from typing import Any, Dict, List, Optional
from datetime import date, timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Path, Body, Request, status
from sqlalchemy.orm import Session

from gymschedule.core.config import get_settings
from gymschedule.core.date_utils import get_today_in_gym_timezone
from gymschedule.db.session import get_db
from gymschedule.models.schedule import (
    ClassCategory,
    ClassType,
    ClassInstanceStatus
)
from gymschedule.services.schedule import (
    ClassSeriesService,
    ClassInstanceService,
    NotFoundError,
    ValidationError,
    StoreError
)
from gymschedule.services.recurrence import (
    RecurrenceEngine,
    RecurrenceError,
    InvalidWindow,
    InstanceNotFound
)
from gymschedule.schemas.schedule import (
    ClassSeries, ClassSeriesCreate, ClassSeriesUpdate, ClassSeriesList,
    ClassInstance, ClassInstanceCreate, ClassInstanceUpdate, ClassInstanceList,
    GenerationRequest, GenerationResult,
    CancelRequest, CancelResult, CancelScope, OperationResult
)


def raise_service_error(error: Exception) -> None:
    """Traducir las excepciones de los servicios a HTTPException."""
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
