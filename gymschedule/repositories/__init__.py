# Inicializador del paquete repositories
from gymschedule.repositories.base import BaseRepository
from gymschedule.repositories.schedule import (
    class_series_repository,
    class_instance_repository
)
