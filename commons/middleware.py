# commons/middleware.py

import logging
import time
import uuid

from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("django.request")


class RequestLogMiddleware(MiddlewareMixin):
    """
    Atribui um request_id a cada requisição (cabeçalho X-Request-ID ou UUID
    novo), devolve-o na resposta e registra método, rota, status e latência.
    """

    def process_request(self, request):
        request.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request._start_time = time.monotonic()

    def process_response(self, request, response):
        inicio = getattr(request, "_start_time", None)
        latency = int((time.monotonic() - inicio) * 1000) if inicio is not None else 0
        request_id = getattr(request, "request_id", "-")

        response["X-Request-ID"] = request_id
        logger.info(
            "http_request",
            extra={
                "event": "http_request",
                "request_id": request_id,
                "path": request.path,
                "method": request.method,
                "status": response.status_code,
                "latency_ms": latency,
            },
        )
        return response
