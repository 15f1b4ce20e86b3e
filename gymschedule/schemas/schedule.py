from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, time, date
from enum import Enum

from gymschedule.models.schedule import (
    ClassCategory,
    ClassType,
    ClassInstanceStatus
)

# Alias para los campos llamados "date"
DateType = date


# ClassSeries schemas
class ClassSeriesBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=80)
    weekday: int = Field(..., ge=0, le=6, description="Día de la semana (0=Domingo, 6=Sábado)")
    start_time: time
    end_time: time
    category: ClassCategory
    class_type: ClassType
    instructor: str = Field(..., min_length=3, max_length=60)
    max_capacity: int = Field(..., ge=1, le=100)
    active: bool = True
    period_start: date
    period_end: Optional[date] = None

    @field_validator('title', 'instructor', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class ClassSeriesCreate(ClassSeriesBase):
    @model_validator(mode='after')
    def check_times_and_period(self):
        if self.end_time <= self.start_time:
            raise ValueError('end_time debe ser posterior a start_time')
        if self.period_end is not None and self.period_end < self.period_start:
            raise ValueError('period_end debe ser igual o posterior a period_start')
        return self


class ClassSeriesUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=80)
    weekday: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    category: Optional[ClassCategory] = None
    class_type: Optional[ClassType] = None
    instructor: Optional[str] = Field(None, min_length=3, max_length=60)
    max_capacity: Optional[int] = Field(None, ge=1, le=100)
    active: Optional[bool] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    @field_validator('title', 'instructor', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode='after')
    def check_updated_values(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError('end_time debe ser posterior a start_time')
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValueError('period_end debe ser igual o posterior a period_start')
        return self


class ClassSeries(ClassSeriesBase):
    # Sin validación cruzada: una serie cancelada desde su primera clase guarda period_end < period_start
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ClassSeriesList(BaseModel):
    data: List[ClassSeries]
    count: int


# ClassInstance schemas
class ClassInstanceBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=80)
    date: DateType
    start_time: time
    end_time: time
    instructor: str = Field(..., min_length=3, max_length=60)
    max_capacity: int = Field(..., ge=1, le=100)
    category: ClassCategory
    class_type: ClassType

    @field_validator('title', 'instructor', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class ClassInstanceCreate(ClassInstanceBase):
    @model_validator(mode='after')
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError('end_time debe ser posterior a start_time')
        return self


class ClassInstanceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=80)
    date: Optional[DateType] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    instructor: Optional[str] = Field(None, min_length=3, max_length=60)
    max_capacity: Optional[int] = Field(None, ge=1, le=100)
    category: Optional[ClassCategory] = None
    class_type: Optional[ClassType] = None
    status: Optional[ClassInstanceStatus] = None

    @field_validator('title', 'instructor', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode='after')
    def check_updated_times(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError('end_time debe ser posterior a start_time')
        return self


class ClassInstance(ClassInstanceBase):
    id: int
    status: ClassInstanceStatus
    series_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ClassInstanceList(BaseModel):
    data: List[ClassInstance]
    count: int


# Generación de clases recurrentes
class GenerationRequest(BaseModel):
    window_start: Optional[date] = Field(None, description="Primer día de la ventana (por defecto hoy)")
    window_end: Optional[date] = Field(None, description="Último día de la ventana (por defecto hoy + 35 días)")
    series_id: Optional[int] = Field(None, description="Generar solo para esta serie")


class GenerationPeriod(BaseModel):
    window_start: date
    window_end: date


class GenerationResult(BaseModel):
    created: int
    existing: int
    series_processed: int
    period: GenerationPeriod


# Cancelación de clases
class CancelScope(str, Enum):
    SINGLE = "single"
    FUTURE = "future"


class CancelRequest(BaseModel):
    scope: CancelScope = CancelScope.SINGLE


class CancelResult(BaseModel):
    ok: bool = True
    scope: CancelScope


class OperationResult(BaseModel):
    ok: bool = True
