import os
from typing import Any, List, Optional, Union
from functools import lru_cache
import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configurar el logger
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Configuración básica
    API_V1_STR: str = "/api/v1"

    # Información del proyecto
    PROJECT_NAME: str = "GymSchedule"
    PROJECT_DESCRIPTION: str = "API con FastAPI para series de clases recurrentes de gimnasios"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "False").lower() in ("true", "1", "t")

    # Logging
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    DATABASE_URL: str = "sqlite:///./gymschedule.db"
    SQLALCHEMY_DATABASE_URI: Optional[str] = None  # Si falta se usa DATABASE_URL

    @field_validator("DATABASE_URL", "SQLALCHEMY_DATABASE_URI", mode="before")
    def ensure_proper_url_format(cls, v: Optional[str], info) -> Any:
        """Asegura que las URLs de base de datos estén en el formato correcto."""
        if not v:
            return "sqlite:///./gymschedule.db" if info.field_name == "DATABASE_URL" else None
        # Asegurar formato postgresql://
        if v.startswith('postgres://'):
            logger.info("Corrigiendo formato de postgres:// a postgresql://")
            return 'postgresql://' + v[len('postgres://'):]
        return v

    # Zona horaria del gimnasio: define qué es "hoy" en los endpoints
    GYM_TIMEZONE: str = "UTC"

    # Generación de clases recurrentes
    GENERATION_BATCH_SIZE: int = 200  # Filas por INSERT
    DEFAULT_GENERATION_DAYS: int = 35  # Ventana por defecto: hoy + 35 días

    # Listados de clases
    INSTANCE_LIST_DEFAULT_LIMIT: int = 100
    INSTANCE_LIST_MAX_LIMIT: int = 200

    # Middleware de tiempos
    SLOW_REQUEST_THRESHOLD_MS: int = 1000

    def get_database_uri(self) -> str:
        return self.SQLALCHEMY_DATABASE_URI or self.DATABASE_URL

# Usar una función con caché para obtener la configuración
@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.info("Configuración cargada correctamente")
    return settings
