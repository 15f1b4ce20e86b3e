from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import SQLAlchemyError
import logging

from gymschedule.core.config import get_settings

logger = logging.getLogger(__name__)

# Obtener la instancia de configuración
settings_instance = get_settings()

db_url = settings_instance.get_database_uri()

# Ocultar credenciales en el log
display_url = db_url
if '@' in display_url:
    scheme = display_url.split('://')[0]
    host_info = display_url.split('@')[1]
    display_url = f"{scheme}://***@{host_info}"

logger.info(f"URL utilizada para crear el engine: {display_url}")

if db_url.startswith("sqlite"):
    # SQLite para desarrollo local y pruebas
    engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        db_url,
        echo=False,  # SIEMPRE False en producción para mejor rendimiento
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=180,
        connect_args={
            "connect_timeout": 10,  # Timeout de conexión explícito
            "options": "-c statement_timeout=30000",
        },
    )

# Crear clase de sesión
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependencia para obtener la sesión de DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de SQLAlchemy en la sesión: {e}", exc_info=True)
        db.rollback()  # Hacer rollback en caso de error
        raise  # Relanzar la excepción para que FastAPI la maneje
    finally:
        # Asegurarse siempre de cerrar la sesión
        db.close()
