import time
import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

logger = logging.getLogger("timing_middleware")

class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware que mide el tiempo de respuesta de cada solicitud y lo expone
    en la cabecera X-Process-Time.
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: int = 1000):
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Registrar el tiempo de inicio y la información de la solicitud
        start_time = time.time()
        method = request.method
        path = request.url.path

        response = await call_next(request)

        # Calcular tiempo de procesamiento
        process_time = (time.time() - start_time) * 1000  # En milisegundos
        process_time_str = f"{process_time:.2f}ms"
        response.headers["X-Process-Time"] = process_time_str

        if process_time > self.slow_threshold_ms:
            logger.warning(f"Solicitud lenta: {method} {path} tardó {process_time_str}")
        else:
            logger.debug(f"{method} {path} -> {response.status_code} en {process_time_str}")

        return response
