"""API middleware."""

from attune.api.middleware.context import LoggingContextMiddleware

__all__ = ["LoggingContextMiddleware"]
