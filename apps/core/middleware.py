"""
Request middleware for the editor.

- RequestIDMiddleware: accepts or generates an X-Request-ID per request and
  keeps it in thread-local storage for log correlation.
- EditorErrorMiddleware: top-level handler for editor exceptions that escape
  a view (configuration defects, token mismatches).

Usage:
    MIDDLEWARE = [
        ...
        'apps.core.middleware.RequestIDMiddleware',
        'apps.core.middleware.EditorErrorMiddleware',
    ]
"""

import uuid
import threading
import logging
from django.utils.deprecation import MiddlewareMixin

from .exceptions import editor_exception_response

logger = logging.getLogger(__name__)

_request_context = threading.local()


def get_request_id():
    """
    Get the current request ID from thread-local storage.

    Returns None if called outside of a request context.
    """
    return getattr(_request_context, 'request_id', None)


def set_request_context(request_id):
    """Set request context in thread-local storage."""
    _request_context.request_id = request_id


def clear_request_context():
    """Clear request context from thread-local storage."""
    _request_context.request_id = None


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware to handle request IDs for tracing.

    Flow:
    1. Check for incoming X-Request-ID header
    2. Generate new UUID if not present or malformed
    3. Store in thread-local and on request.request_id
    4. Echo in the response headers
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
    RESPONSE_HEADER = 'X-Request-ID'

    def process_request(self, request):
        request_id = request.META.get(self.REQUEST_ID_HEADER)

        if request_id:
            try:
                uuid.UUID(request_id)
            except (ValueError, TypeError):
                request_id = str(uuid.uuid4())
        else:
            request_id = str(uuid.uuid4())

        set_request_context(request_id)
        request.request_id = request_id
        return None

    def process_response(self, request, response):
        request_id = getattr(request, 'request_id', None)
        if request_id:
            response[self.RESPONSE_HEADER] = request_id

        clear_request_context()
        return response


class EditorErrorMiddleware(MiddlewareMixin):
    """
    Convert EditorError subclasses raised by views into JSON error bodies.

    Validation and conflict errors never reach this point; the editor folds
    them into the rendered page. What arrives here halts the request.
    """

    def process_exception(self, request, exception):
        return editor_exception_response(exception, request)


class RequestIDFilter(logging.Filter):
    """
    Logging filter that adds request_id to log records.

    LOGGING = {
        'filters': {'request_id': {'()': 'apps.core.middleware.RequestIDFilter'}},
        ...
    }
    """

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        return True


def celery_request_id_headers():
    """
    Get headers to pass to Celery tasks for correlation.

    Usage:
        task.apply_async(args=[...], headers=celery_request_id_headers())
    """
    request_id = get_request_id()
    if request_id:
        return {'request_id': request_id}
    return {}


def setup_celery_request_context(headers):
    """Set up request context in a Celery task from its headers."""
    request_id = headers.get('request_id')
    if request_id:
        set_request_context(request_id)
    else:
        set_request_context(str(uuid.uuid4()))
