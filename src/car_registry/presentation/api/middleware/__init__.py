"""Middleware module for the car registry API."""

from .logging import RequestResponseLoggingMiddleware, CORRELATION_ID_HEADER

__all__ = [
    "RequestResponseLoggingMiddleware",
    "CORRELATION_ID_HEADER"
]
