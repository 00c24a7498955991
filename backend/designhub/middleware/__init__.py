"""Middleware package."""

from designhub.middleware.logging import LoggingMiddleware
from designhub.middleware.request_id import RequestIDMiddleware

__all__ = ["LoggingMiddleware", "RequestIDMiddleware"]
