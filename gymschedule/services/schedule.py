from typing import List, Optional, Tuple
from datetime import date
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gymschedule.core.config import get_settings
from gymschedule.core.date_utils import get_today_in_gym_timezone
from gymschedule.models.schedule import (
    ClassSeries,
    ClassInstance,
    ClassInstanceStatus,
    ClassCategory,
    ClassType
)
from gymschedule.repositories.schedule import class_series_repository, class_instance_repository
from gymschedule.schemas.schedule import (
    ClassSeriesCreate,
    ClassSeriesUpdate,
    ClassInstanceCreate,
    ClassInstanceUpdate
)

logger = logging.getLogger(__name__)


class NotFoundError(Exception):
    """Raised when a resource is not found."""
    pass


class ValidationError(Exception):
    """Raised when validation fails."""
    pass


class StoreError(Exception):
    """Raised when the database rejects a read or write."""
    pass


class ClassSeriesService:
    """Service for managing recurring class series (CRUD operations)."""

    def __init__(self, db: Session):
        """
        Initialize the class series service.

        Args:
            db: Database session
        """
        self.db = db
        self.repository = class_series_repository
        self.instance_repository = class_instance_repository

    def list_series(
        self,
        active: Optional[bool] = None,
        category: Optional[ClassCategory] = None,
        class_type: Optional[ClassType] = None
    ) -> Tuple[List[ClassSeries], int]:
        try:
            series = self.repository.get_filtered(
                self.db, active=active, category=category, class_type=class_type
            )
        except SQLAlchemyError as e:
            logger.error(f"Error listando series: {e}", exc_info=True)
            raise StoreError("No se pudieron cargar las series de clases.") from e
        return series, len(series)

    def get_series(self, series_id: int) -> ClassSeries:
        series = self.repository.get(self.db, id=series_id)
        if not series:
            raise NotFoundError(f"Serie de clases {series_id} no encontrada")
        return series

    def create_series(self, series_data: ClassSeriesCreate) -> ClassSeries:
        """
        Create a new class series.

        Args:
            series_data: Validated series data

        Returns:
            The created series

        Raises:
            StoreError: If the insert fails
        """
        try:
            series = self.repository.create(self.db, obj_in=series_data)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creando serie: {e}", exc_info=True)
            raise StoreError("No se pudo crear la serie de clases.") from e

        logger.info(f"Serie {series.id} creada: {series.title} (weekday={series.weekday})")
        return series

    def update_series(self, series_id: int, series_data: ClassSeriesUpdate) -> ClassSeries:
        """
        Partially update a class series.

        The time and period checks are repeated against the stored values
        when the patch only carries one side of the pair. Sending
        `period_end: null` makes the series open-ended again.

        Raises:
            NotFoundError: If the series does not exist
            ValidationError: If the merged values are inconsistent
            StoreError: If the update fails
        """
        series = self.get_series(series_id)
        update_data = series_data.model_dump(exclude_unset=True)
        # Solo period_end admite null (serie sin fecha de fin)
        update_data = {k: v for k, v in update_data.items() if v is not None or k == "period_end"}

        start_time = update_data.get("start_time", series.start_time)
        end_time = update_data.get("end_time", series.end_time)
        if end_time <= start_time:
            raise ValidationError("end_time debe ser posterior a start_time")

        period_start = update_data.get("period_start", series.period_start)
        period_end = update_data.get("period_end", series.period_end)
        if ("period_start" in update_data or "period_end" in update_data) and \
                period_end is not None and period_end < period_start:
            raise ValidationError("period_end debe ser igual o posterior a period_start")

        try:
            return self.repository.update(self.db, db_obj=series, obj_in=update_data)
        except SQLAlchemyError as e:
            logger.error(f"Error actualizando serie {series_id}: {e}", exc_info=True)
            raise StoreError("No se pudo actualizar la serie de clases.") from e

    def retire_series(self, series_id: int, cancel_future: bool = False) -> None:
        """
        Deactivate a series as of today.

        The series keeps its past instances. With `cancel_future` the
        instances dated today or later are canceled too.

        Args:
            series_id: Series ID
            cancel_future: Also cancel instances from today on

        Raises:
            NotFoundError: If the series does not exist
            StoreError: If any write fails
        """
        series = self.get_series(series_id)
        today = get_today_in_gym_timezone(get_settings().GYM_TIMEZONE)

        try:
            self.repository.update(self.db, db_obj=series, obj_in={"active": False, "period_end": today})
        except SQLAlchemyError as e:
            logger.error(f"Error desactivando serie {series_id}: {e}", exc_info=True)
            raise StoreError("No se pudo desactivar la serie.") from e

        logger.info(f"Serie {series_id} desactivada con period_end={today}")

        if cancel_future:
            try:
                affected = self.instance_repository.cancel_series_from(
                    self.db, series_id=series_id, from_date=today
                )
            except SQLAlchemyError as e:
                logger.error(f"Error cancelando clases futuras de la serie {series_id}: {e}", exc_info=True)
                raise StoreError(
                    "La serie fue desactivada, pero no se pudieron cancelar las clases futuras."
                ) from e
            logger.info(f"Serie {series_id}: {affected} clases futuras canceladas")


class ClassInstanceService:
    """Service for managing dated class instances."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = class_instance_repository

    def list_instances(
        self,
        status: Optional[ClassInstanceStatus] = None,
        category: Optional[ClassCategory] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None
    ) -> Tuple[List[ClassInstance], int]:
        settings = get_settings()
        if limit is None:
            limit = settings.INSTANCE_LIST_DEFAULT_LIMIT
        limit = min(max(limit, 1), settings.INSTANCE_LIST_MAX_LIMIT)

        try:
            instances = self.repository.get_filtered(
                self.db,
                status=status,
                category=category,
                date_from=date_from,
                date_to=date_to,
                limit=limit
            )
        except SQLAlchemyError as e:
            logger.error(f"Error listando clases: {e}", exc_info=True)
            raise StoreError("No se pudieron cargar las clases.") from e
        return instances, len(instances)

    def get_instance(self, instance_id: int) -> ClassInstance:
        instance = self.repository.get(self.db, id=instance_id)
        if not instance:
            raise NotFoundError(f"Clase {instance_id} no encontrada")
        return instance

    def create_instance(self, instance_data: ClassInstanceCreate) -> ClassInstance:
        """
        Create an ad-hoc class (not linked to any series).

        Raises:
            ValidationError: If the date is in the past
            StoreError: If the insert fails
        """
        today = get_today_in_gym_timezone(get_settings().GYM_TIMEZONE)
        if instance_data.date < today:
            raise ValidationError("No es posible crear una clase en una fecha pasada.")

        obj_in = instance_data.model_dump()
        obj_in["status"] = ClassInstanceStatus.SCHEDULED
        obj_in["series_id"] = None
        try:
            instance = self.repository.create(self.db, obj_in=obj_in)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creando clase: {e}", exc_info=True)
            raise StoreError("No se pudo crear la clase.") from e

        logger.info(f"Clase suelta {instance.id} creada para {instance.date}")
        return instance

    def update_instance(self, instance_id: int, instance_data: ClassInstanceUpdate) -> ClassInstance:
        """
        Partially update a class, including status changes (held / canceled).

        Raises:
            NotFoundError: If the class does not exist
            ValidationError: If the merged times are inconsistent, the new date is in the past
                or the series already has a class on that date
            StoreError: If the update fails
        """
        instance = self.get_instance(instance_id)
        update_data = instance_data.model_dump(exclude_unset=True, exclude_none=True)

        if "date" in update_data:
            today = get_today_in_gym_timezone(get_settings().GYM_TIMEZONE)
            if update_data["date"] < today:
                raise ValidationError("No es posible mover una clase a una fecha pasada.")

        start_time = update_data.get("start_time", instance.start_time)
        end_time = update_data.get("end_time", instance.end_time)
        if end_time <= start_time:
            raise ValidationError("end_time debe ser posterior a start_time")

        try:
            return self.repository.update(self.db, db_obj=instance, obj_in=update_data)
        except IntegrityError as e:
            logger.warning(f"Clase {instance_id}: la serie ya tiene una clase el {update_data.get('date')}")
            raise ValidationError("La serie ya tiene una clase en esa fecha.") from e
        except SQLAlchemyError as e:
            logger.error(f"Error actualizando clase {instance_id}: {e}", exc_info=True)
            raise StoreError("No se pudo actualizar la clase.") from e
