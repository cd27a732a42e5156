"""
Observability Middleware.

Tags every request with a correlation ID and carries it into the log
records of the services the request runs, so one dispatch change
(e.g. a trip advance and its order cascade) can be followed across modules.
"""

import time
import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from backend.app.core.config import settings

logger = logging.getLogger("dispatch")

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


class CorrelationIdFilter(logging.Filter):
    """Stamps the current request's correlation ID on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


def configure_logging() -> None:
    """Configure the root logger once for the process."""
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] [cid=%(correlation_id)s] %(message)s"
    ))
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        handlers=[handler],
    )


def _dispatch_entity(path: str) -> dict:
    # /v1/orders/12/advance -> {"entity": "order", "entity_id": 12}
    parts = [p for p in path.split("/") if p]
    for collection, entity in (("orders", "order"), ("trips", "trip")):
        if collection in parts:
            index = parts.index(collection)
            if index + 1 < len(parts) and parts[index + 1].isdigit():
                return {"entity": entity, "entity_id": int(parts[index + 1])}
    return {}


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        token = correlation_id_var.set(correlation_id)

        try:
            start_time = time.time()
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000  # ms

            response.headers["X-Correlation-ID"] = correlation_id
            response.headers["X-Process-Time"] = str(process_time)

            log_data = {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(process_time, 2),
                **_dispatch_entity(request.url.path),
            }

            if response.status_code >= 500:
                logger.error("Request Failed %s", log_data, extra=log_data)
            elif response.status_code >= 400:
                logger.warning("Request Rejected %s", log_data, extra=log_data)
            else:
                logger.info("Request Handled %s", log_data, extra=log_data)

            return response
        finally:
            correlation_id_var.reset(token)
