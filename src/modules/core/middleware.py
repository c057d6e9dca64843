import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware:
    """Tag every request, and every log line it produces, with a request ID.

    The ID comes from the ``X-Request-ID`` header when the caller sends
    one, otherwise a fresh UUID4. It is bound into structlog's
    contextvars and echoed back on the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        path = request.get_full_path()
        logger.info("request.started", method=request.method, path=path)

        response = self.get_response(request)

        logger.info(
            "request.finished",
            method=request.method,
            path=path,
            status_code=response.status_code,
        )
        response[REQUEST_ID_HEADER] = cid
        return response
