"""
Middleware: request logging.
"""
import time
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

# long-poll requests on the realtime feed are expected to be slow
SLOW_REQUEST_MS = 2000
SLOW_EXEMPT_PREFIXES = ("/api/v1/realtime/",)


class RequestLoggingMiddleware(MiddlewareMixin):
    def process_request(self, request):
        request._start_time = time.monotonic()

    def process_response(self, request, response):
        started = getattr(request, "_start_time", None)
        duration = (time.monotonic() - started) * 1000.0 if started is not None else 0.0
        path = request.get_full_path()
        user = getattr(request, "user", None)
        user_id = getattr(user, "id", None) if user is not None and user.is_authenticated else "-"

        logger.debug("%s %s %s %.2fms user=%s", request.method, path, response.status_code, duration, user_id)
        if response.status_code >= 500:
            logger.error("Server error on %s %s (%s) user=%s", request.method, path, response.status_code, user_id)
        elif duration > SLOW_REQUEST_MS and not request.path.startswith(SLOW_EXEMPT_PREFIXES):
            logger.warning("Slow request %s %s took %.0fms", request.method, path, duration)
        return response
