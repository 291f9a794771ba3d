"""
Custom middleware for API request logging.
"""
import logging
import time

logger = logging.getLogger('busops.api')


class APILoggingMiddleware:
    """
    Logs method, path, status and duration of every API request.
    Failed requests (status >= 400) are logged at WARNING.
    """

    LOGGED_PREFIX = '/api/'
    SKIPPED_PREFIXES = ('/api/docs', '/api/schema')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        should_log = (
            request.path.startswith(self.LOGGED_PREFIX)
            and not request.path.startswith(self.SKIPPED_PREFIXES)
        )
        if not should_log:
            return self.get_response(request)

        start_time = time.monotonic()
        response = self.get_response(request)
        execution_time_ms = (time.monotonic() - start_time) * 1000

        user = getattr(request, 'user', None)
        user_id = user.id if user is not None and user.is_authenticated else None

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level, "%s %s -> %s in %.2fms (user=%s)",
            request.method, request.path, response.status_code, execution_time_ms, user_id,
        )
        return response
