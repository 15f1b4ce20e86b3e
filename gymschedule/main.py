import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from gymschedule.core.logging_config import setup_logging

# Configurar el logging ANTES de importar/crear otros elementos
setup_logging()

from gymschedule.api.v1.api import api_router
from gymschedule.core.config import get_settings
from gymschedule.db.session import engine
from gymschedule.middleware.timing import TimingMiddleware

logger = logging.getLogger(__name__)

# Obtener la instancia de configuración al inicio del módulo
settings_instance = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Lifespan: Startup iniciado...")
    logger.info(f"Lifespan: Zona horaria del gimnasio: {settings_instance.GYM_TIMEZONE}")

    yield  # Aplicación en ejecución

    logger.info("Lifespan: Shutdown iniciado...")
    engine.dispose()
    logger.info("Lifespan: Pool de conexiones cerrado.")


app = FastAPI(
    title=settings_instance.PROJECT_NAME,
    description=settings_instance.PROJECT_DESCRIPTION,
    version=settings_instance.VERSION,
    openapi_url=f"{settings_instance.API_V1_STR}/openapi.json",
    docs_url=f"{settings_instance.API_V1_STR}/docs",
    redoc_url=f"{settings_instance.API_V1_STR}/redoc",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Middleware: Recibida petición: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Middleware: Enviando respuesta: {response.status_code}")
    return response


# Añadir middleware para medir el tiempo de respuesta
app.add_middleware(TimingMiddleware, slow_threshold_ms=settings_instance.SLOW_REQUEST_THRESHOLD_MS)

# Lista de orígenes permitidos para CORS
origins = settings_instance.BACKEND_CORS_ORIGINS or []

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=86400,  # 24 horas en segundos
)

# Incluir routers
app.include_router(api_router, prefix=settings_instance.API_V1_STR)


# Ruta raíz
@app.get("/")
def root():
    return {
        "message": "Bienvenido a GymSchedule",
        "docs": f"{settings_instance.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    uvicorn.run("gymschedule.main:app", host="0.0.0.0", port=8000, reload=settings_instance.DEBUG_MODE)
