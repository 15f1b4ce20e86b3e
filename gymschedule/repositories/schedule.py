from typing import List, Optional, Set, Tuple, Iterable
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import or_

from gymschedule.repositories.base import BaseRepository
from gymschedule.models.schedule import (
    ClassSeries,
    ClassInstance,
    ClassInstanceStatus,
    ClassCategory,
    ClassType
)
from gymschedule.schemas.schedule import (
    ClassSeriesCreate,
    ClassSeriesUpdate,
    ClassInstanceCreate,
    ClassInstanceUpdate
)


class ClassSeriesRepository(BaseRepository[ClassSeries, ClassSeriesCreate, ClassSeriesUpdate]):
    def get_active_in_window(
        self, db: Session, *, window_start: date, window_end: date, series_id: Optional[int] = None
    ) -> List[ClassSeries]:
        """
        Obtener las series activas cuyo periodo se solapa con la ventana.

        Args:
            db: Sesión de base de datos
            window_start: Primer día de la ventana
            window_end: Último día de la ventana
            series_id: Restringir a una sola serie (opcional)
        """
        criteria = [
            ClassSeries.active.is_(True),
            ClassSeries.period_start <= window_end,
            or_(ClassSeries.period_end.is_(None), ClassSeries.period_end >= window_start),
        ]
        if series_id is not None:
            criteria.append(ClassSeries.id == series_id)

        return self.select(
            db,
            *criteria,
            order_by=(ClassSeries.weekday, ClassSeries.start_time, ClassSeries.id)
        )

    def get_filtered(
        self,
        db: Session,
        *,
        active: Optional[bool] = None,
        category: Optional[ClassCategory] = None,
        class_type: Optional[ClassType] = None
    ) -> List[ClassSeries]:
        """Listado de series ordenado por día de la semana y hora de inicio."""
        criteria = []
        if active is not None:
            criteria.append(ClassSeries.active.is_(active))
        if category is not None:
            criteria.append(ClassSeries.category == category)
        if class_type is not None:
            criteria.append(ClassSeries.class_type == class_type)

        return self.select(db, *criteria, order_by=(ClassSeries.weekday, ClassSeries.start_time))


class ClassInstanceRepository(BaseRepository[ClassInstance, ClassInstanceCreate, ClassInstanceUpdate]):
    def get_series_date_keys(
        self, db: Session, *, series_ids: Iterable[int], window_start: date, window_end: date
    ) -> Set[Tuple[int, date]]:
        """
        Claves (series_id, date) de las clases ya generadas dentro de la ventana.

        Args:
            db: Sesión de base de datos
            series_ids: Series a consultar
            window_start: Primer día de la ventana
            window_end: Último día de la ventana
        """
        series_ids = list(series_ids)
        if not series_ids:
            return set()

        rows = (
            db.query(ClassInstance.series_id, ClassInstance.date)
            .filter(
                ClassInstance.series_id.in_(series_ids),
                ClassInstance.date >= window_start,
                ClassInstance.date <= window_end
            )
            .all()
        )
        return {(row.series_id, row.date) for row in rows if row.series_id is not None}

    def cancel_series_from(self, db: Session, *, series_id: int, from_date: date) -> int:
        """
        Cancelar todas las clases de una serie con fecha >= from_date.

        Returns:
            Número de clases actualizadas
        """
        return self.update_where(
            db,
            ClassInstance.series_id == series_id,
            ClassInstance.date >= from_date,
            patch={"status": ClassInstanceStatus.CANCELED}
        )

    def get_filtered(
        self,
        db: Session,
        *,
        status: Optional[ClassInstanceStatus] = None,
        category: Optional[ClassCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 100
    ) -> List[ClassInstance]:
        """Listado de clases ordenado por fecha y hora de inicio."""
        criteria = []
        if status is not None:
            criteria.append(ClassInstance.status == status)
        if category is not None:
            criteria.append(ClassInstance.category == category)
        if date_from is not None:
            criteria.append(ClassInstance.date >= date_from)
        if date_to is not None:
            criteria.append(ClassInstance.date <= date_to)

        return self.select(
            db,
            *criteria,
            order_by=(ClassInstance.date, ClassInstance.start_time, ClassInstance.id),
            limit=limit
        )


class_series_repository = ClassSeriesRepository(ClassSeries)
class_instance_repository = ClassInstanceRepository(ClassInstance)
