import logging
import threading
import time
import uuid

from django.db import DatabaseError

_local = threading.local()

logger = logging.getLogger(__name__)


def get_request_id(default: str | None = None) -> str | None:
    return getattr(_local, "request_id", default)


class RequestIdMiddleware:
    """Tags each request with X-Request-Id and records /api/ calls in RequestLog."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        _local.request_id = rid
        started = time.monotonic()
        response = self.get_response(request)
        response["X-Request-Id"] = rid
        if request.path.startswith("/api/"):
            self._record(request, response, rid, started)
        return response

    def _record(self, request, response, rid, started):
        from .models import RequestLog

        user = getattr(request, "user", None)
        try:
            RequestLog.objects.create(
                method=request.method,
                path=request.path[:512],
                status_code=response.status_code,
                user=user if user is not None and user.is_authenticated else None,
                request_id=rid,
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        except DatabaseError as exc:
            logger.warning("Could not record request log for %s: %s", request.path, exc)
