"""
Utilidades de fechas para la generación de clases recurrentes.

Toda la aritmética trabaja con `datetime.date` (sin hora ni zona horaria) y
avanza en días completos, de modo que el horario de verano nunca desplaza el
día de la semana calculado. La zona horaria del gimnasio solo se usa para
saber qué día es "hoy".
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
import pytz


def day_before(value: date) -> Optional[date]:
    """Devuelve el día anterior, o None si no es representable (date.min)."""
    try:
        return value - timedelta(days=1)
    except OverflowError:
        return None


def sunday_based_weekday(value: date) -> int:
    """Día de la semana con 0=Domingo ... 6=Sábado."""
    return value.isoweekday() % 7


def first_weekday_on_or_after(start: date, weekday: int) -> date:
    """
    Primera fecha >= start que cae en `weekday` (0=Domingo).

    El desplazamiento siempre está entre 0 y 6 días.
    """
    offset = (weekday - sunday_based_weekday(start) + 7) % 7
    return start + timedelta(days=offset)


def normalize_time(value: Union[str, time]) -> str:
    """
    Normaliza una hora a HH:MM:SS.

    - "HH:MM" recibe el sufijo ":00"
    - 8 o más caracteres se recortan a los primeros 8
    - cualquier otro texto se devuelve tal cual
    """
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if len(value) == 5:
        return f"{value}:00"
    if len(value) >= 8:
        return value[:8]
    return value


def get_today_in_gym_timezone(gym_timezone: str = "UTC") -> date:
    """
    Obtiene la fecha actual en la zona horaria del gimnasio.

    Args:
        gym_timezone: Zona horaria del gimnasio (ej: 'America/Sao_Paulo')
    """
    utc_now = datetime.now(timezone.utc)
    tz = pytz.timezone(gym_timezone)
    return utc_now.astimezone(tz).date()
