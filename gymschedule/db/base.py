# Importar todos los modelos para que Alembic los detecte
from gymschedule.db.base_class import Base  # noqa
from gymschedule.models.schedule import ClassSeries, ClassInstance  # noqa
