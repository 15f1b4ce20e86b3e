"""
Motor de clases recurrentes.

Expande las series semanales en clases con fecha dentro de una ventana, sin
duplicar las que ya existen, y cancela clases con alcance "solo esta" o
"esta y las siguientes" (recortando el periodo de la serie).

Las fechas se manejan siempre como `datetime.date` y se avanza en días
completos; el día de la semana usa 0=Domingo.
"""
from typing import Any, Dict, List, Optional, Set, Tuple
from datetime import date, time, timedelta
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gymschedule.core.config import get_settings
from gymschedule.core.date_utils import day_before, first_weekday_on_or_after, normalize_time
from gymschedule.models.schedule import ClassSeries, ClassInstanceStatus
from gymschedule.repositories.schedule import (
    ClassSeriesRepository,
    ClassInstanceRepository,
    class_series_repository,
    class_instance_repository
)
from gymschedule.schemas.schedule import (
    CancelResult,
    CancelScope,
    GenerationPeriod,
    GenerationResult
)

logger = logging.getLogger(__name__)


class RecurrenceError(Exception):
    """Base de los errores del motor de recurrencia."""
    pass


class InvalidWindow(RecurrenceError):
    """Raised when window_end is before window_start."""
    pass


class SeriesLoadFailure(RecurrenceError):
    """Raised when the series could not be read from the store."""
    pass


class InstanceLoadFailure(RecurrenceError):
    """Raised when existing instances could not be read from the store."""
    pass


class InsertBatchFailure(RecurrenceError):
    """Raised when an insert batch fails; earlier batches stay committed."""

    def __init__(self, message: str, created: int, pending: int):
        super().__init__(message)
        self.created = created
        self.pending = pending


class InstanceNotFound(RecurrenceError):
    """Raised when the instance to cancel does not exist."""
    pass


class CancelFailure(RecurrenceError):
    """Raised when the store rejects a cancellation write."""
    pass


def series_occurrences(series: ClassSeries, window_start: date, window_end: date) -> List[date]:
    """
    Fechas en las que la serie tiene clase dentro de la ventana.

    La ventana se recorta primero al periodo de la serie
    [period_start, period_end]; un period_end nulo no tiene límite.

    Args:
        series: Serie (o cualquier objeto con weekday, period_start, period_end)
        window_start: Primer día de la ventana
        window_end: Último día de la ventana

    Returns:
        Fechas ordenadas, separadas 7 días entre sí
    """
    effective_start = max(window_start, series.period_start)
    effective_end = min(window_end, series.period_end) if series.period_end else window_end
    if effective_start > effective_end:
        return []

    occurrences = []
    current = first_weekday_on_or_after(effective_start, series.weekday)
    while current <= effective_end:
        occurrences.append(current)
        current += timedelta(days=7)
    return occurrences


class RecurrenceEngine:
    """Generación y cancelación de clases de series recurrentes."""

    def __init__(
        self,
        db: Session,
        series_repo: Optional[ClassSeriesRepository] = None,
        instance_repo: Optional[ClassInstanceRepository] = None,
        batch_size: Optional[int] = None
    ):
        """
        Args:
            db: Sesión de base de datos
            series_repo: Repositorio de series (por defecto el global)
            instance_repo: Repositorio de clases (por defecto el global)
            batch_size: Filas por INSERT (por defecto GENERATION_BATCH_SIZE)
        """
        self.db = db
        self.series_repo = series_repo or class_series_repository
        self.instance_repo = instance_repo or class_instance_repository
        self.batch_size = batch_size or get_settings().GENERATION_BATCH_SIZE

    def generate(
        self, window_start: date, window_end: date, series_id: Optional[int] = None
    ) -> GenerationResult:
        """
        Materializar las clases de las series activas dentro de la ventana.

        Es idempotente por fecha: las clases ya generadas se cuentan como
        existentes y no se vuelven a insertar.

        Args:
            window_start: Primer día de la ventana (inclusive)
            window_end: Último día de la ventana (inclusive)
            series_id: Restringir la generación a una serie

        Returns:
            GenerationResult con created, existing, series_processed y period

        Raises:
            InvalidWindow: Si window_end es anterior a window_start
            SeriesLoadFailure: Si no se pudieron leer las series
            InstanceLoadFailure: Si no se pudieron leer las clases existentes
            InsertBatchFailure: Si falló un lote de inserción
        """
        if window_end < window_start:
            raise InvalidWindow(
                f"Periodo inválido: window_end ({window_end}) es anterior a window_start ({window_start})"
            )

        period = GenerationPeriod(window_start=window_start, window_end=window_end)

        try:
            series_list = self.series_repo.get_active_in_window(
                self.db, window_start=window_start, window_end=window_end, series_id=series_id
            )
        except SQLAlchemyError as e:
            logger.error(f"Error cargando series para {window_start}..{window_end}: {e}", exc_info=True)
            raise SeriesLoadFailure("No se pudieron cargar las series de clases.") from e

        if not series_list:
            logger.info(f"Sin series activas para {window_start}..{window_end} (serie={series_id})")
            return GenerationResult(created=0, existing=0, series_processed=0, period=period)

        try:
            existing_keys = self.instance_repo.get_series_date_keys(
                self.db,
                series_ids=[series.id for series in series_list],
                window_start=window_start,
                window_end=window_end
            )
        except SQLAlchemyError as e:
            logger.error(f"Error cargando clases existentes para {window_start}..{window_end}: {e}", exc_info=True)
            raise InstanceLoadFailure("No se pudieron cargar las clases ya existentes.") from e

        pending_rows, existing = self._plan_instances(series_list, window_start, window_end, existing_keys)
        created = self._insert_in_batches(pending_rows)

        logger.info(
            f"Generación {window_start}..{window_end}: {created} creadas, {existing} existentes, "
            f"{len(series_list)} series procesadas"
        )
        return GenerationResult(
            created=created,
            existing=existing,
            series_processed=len(series_list),
            period=period
        )

    def _plan_instances(
        self,
        series_list: List[ClassSeries],
        window_start: date,
        window_end: date,
        existing_keys: Set[Tuple[int, date]]
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Filas a insertar y número de fechas que ya estaban generadas."""
        pending_rows = []
        existing = 0

        for series in series_list:
            for occurrence in series_occurrences(series, window_start, window_end):
                key = (series.id, occurrence)
                if key in existing_keys:
                    existing += 1
                    continue
                pending_rows.append(self._build_instance_row(series, occurrence))
                # Una serie nunca inserta dos veces la misma fecha en la misma llamada
                existing_keys.add(key)

        return pending_rows, existing

    @staticmethod
    def _build_instance_row(series: ClassSeries, occurrence: date) -> Dict[str, Any]:
        return {
            "title": series.title,
            "date": occurrence,
            "start_time": time.fromisoformat(normalize_time(series.start_time)),
            "end_time": time.fromisoformat(normalize_time(series.end_time)),
            "instructor": series.instructor,
            "max_capacity": series.max_capacity,
            "status": ClassInstanceStatus.SCHEDULED,
            "category": series.category,
            "class_type": series.class_type,
            "series_id": series.id,
        }

    def _insert_in_batches(self, rows: List[Dict[str, Any]]) -> int:
        created = 0
        for index in range(0, len(rows), self.batch_size):
            chunk = rows[index:index + self.batch_size]
            try:
                created += self.instance_repo.insert_many(self.db, chunk)
            except SQLAlchemyError as e:
                pending = len(rows) - created
                logger.error(
                    f"Falló el lote {index // self.batch_size + 1}: {created} clases confirmadas, "
                    f"{pending} sin confirmar: {e}",
                    exc_info=True
                )
                raise InsertBatchFailure(
                    f"No se pudieron generar las clases recurrentes: {pending} de {len(rows)} "
                    f"clases sin confirmar. Repita la generación con el mismo periodo.",
                    created=created,
                    pending=pending
                ) from e
            logger.debug(f"Lote {index // self.batch_size + 1} insertado ({len(chunk)} clases)")
        return created

    def cancel(self, instance_id: int, scope: CancelScope = CancelScope.SINGLE) -> CancelResult:
        """
        Cancelar una clase, o esa clase y todas las siguientes de su serie.

        Con alcance FUTURE el periodo de la serie termina el día anterior a la
        clase; si con eso la serie se queda sin fechas, además se desactiva.
        Una clase sin serie siempre se cancela con alcance SINGLE.

        Args:
            instance_id: ID de la clase
            scope: SINGLE o FUTURE

        Returns:
            CancelResult con el alcance aplicado

        Raises:
            InstanceNotFound: Si la clase no existe
            InstanceLoadFailure: Si no se pudo leer la clase
            CancelFailure: Si falló alguna escritura
        """
        scope = CancelScope(scope)
        try:
            instance = self.instance_repo.get(self.db, id=instance_id)
        except SQLAlchemyError as e:
            logger.error(f"Error cargando la clase {instance_id}: {e}", exc_info=True)
            raise InstanceLoadFailure("No se pudo cargar la clase.") from e

        if instance is None:
            raise InstanceNotFound(f"Clase {instance_id} no encontrada")

        if scope == CancelScope.FUTURE and instance.series_id is not None:
            series_id = instance.series_id
            occurrence_date = instance.date
            try:
                affected = self.instance_repo.cancel_series_from(
                    self.db, series_id=series_id, from_date=occurrence_date
                )
            except SQLAlchemyError as e:
                logger.error(f"Error cancelando clases de la serie {series_id} desde {occurrence_date}: {e}", exc_info=True)
                raise CancelFailure("No se pudieron cancelar las clases futuras.") from e

            self._truncate_series(series_id, occurrence_date)
            logger.info(f"Serie {series_id}: {affected} clases canceladas desde {occurrence_date}")
            return CancelResult(scope=CancelScope.FUTURE)

        try:
            self.instance_repo.update(self.db, db_obj=instance, obj_in={"status": ClassInstanceStatus.CANCELED})
        except SQLAlchemyError as e:
            logger.error(f"Error cancelando la clase {instance_id}: {e}", exc_info=True)
            raise CancelFailure("No se pudo cancelar la clase.") from e

        logger.info(f"Clase {instance_id} cancelada")
        return CancelResult(scope=CancelScope.SINGLE)

    def _truncate_series(self, series_id: int, occurrence_date: date) -> None:
        try:
            series = self.series_repo.get(self.db, id=series_id)
        except SQLAlchemyError as e:
            logger.error(f"Error cargando la serie {series_id}: {e}", exc_info=True)
            raise CancelFailure("Las clases se cancelaron, pero no se pudo cargar la serie.") from e

        if series is None:
            logger.warning(f"Serie {series_id} no encontrada al recortar su periodo")
            return

        previous_day = day_before(occurrence_date)
        if previous_day is None or previous_day < series.period_start:
            # La serie se queda sin ninguna fecha válida
            patch = {"active": False, "period_end": previous_day or occurrence_date}
        else:
            patch = {"period_end": previous_day}

        try:
            self.series_repo.update(self.db, db_obj=series, obj_in=patch)
        except SQLAlchemyError as e:
            logger.error(f"Error recortando el periodo de la serie {series_id}: {e}", exc_info=True)
            raise CancelFailure("Las clases se cancelaron, pero no se pudo actualizar la serie.") from e

        logger.info(f"Serie {series_id} recortada: {patch}")
