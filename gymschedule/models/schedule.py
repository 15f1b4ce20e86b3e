from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Time, DateTime, Enum, CheckConstraint, Date
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
import sqlalchemy as sa

from gymschedule.db.base_class import Base


class ClassCategory(str, enum.Enum):
    CHILD = "child"
    ADULT = "adult"
    ALL = "all"


class ClassType(str, enum.Enum):
    GROUP = "group"
    INDIVIDUAL = "individual"


class ClassInstanceStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    HELD = "held"
    CANCELED = "canceled"


class ClassSeries(Base):
    """Plantilla semanal de una clase recurrente"""
    __tablename__ = "class_series"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(80), nullable=False)
    weekday = Column(Integer, nullable=False)  # 0=Domingo, 6=Sábado
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    category = Column(Enum(ClassCategory), nullable=False)
    class_type = Column(Enum(ClassType), nullable=False)
    instructor = Column(String(60), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True, index=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=True)  # NULL = sin fecha de fin

    # Relaciones
    instances = relationship("ClassInstance", back_populates="series")

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('weekday >= 0 AND weekday <= 6', name='check_series_valid_weekday'),
        CheckConstraint('max_capacity > 0', name='check_series_positive_capacity')
    )


class ClassInstance(Base):
    """Clase concreta en una fecha (generada por una serie o creada a mano)"""
    __tablename__ = "class_instance"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(80), nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    instructor = Column(String(60), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    status = Column(Enum(ClassInstanceStatus), nullable=False, default=ClassInstanceStatus.SCHEDULED)
    category = Column(Enum(ClassCategory), nullable=False)
    class_type = Column(Enum(ClassType), nullable=False)
    # NULL para clases sueltas que no vienen de una serie
    series_id = Column(Integer, ForeignKey("class_series.id"), nullable=True, index=True)

    # Relaciones
    series = relationship("ClassSeries", back_populates="instances")

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Una serie nunca produce dos clases el mismo día
    __table_args__ = (
        sa.UniqueConstraint('series_id', 'date', name='uq_class_instance_series_date'),
    )
