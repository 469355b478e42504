# backend/src/judistats/observability/middleware_correlation.py
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_context import correlation_id_var

HEADER = "X-Correlation-Id"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    - Usa el X-Correlation-Id entrante o genera uno nuevo
    - Lo deja en request.state y en el ContextVar durante el request
    - Lo devuelve en la respuesta
    """

    async def dispatch(self, request: Request, call_next):
        cid = request.headers.get(HEADER) or uuid.uuid4().hex
        request.state.correlation_id = cid

        token = correlation_id_var.set(cid)
        try:
            response: Response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers[HEADER] = cid
        return response
