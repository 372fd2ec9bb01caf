"""
Middleware module - ASGI middleware shared across applications.
"""

from common.middleware.request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
