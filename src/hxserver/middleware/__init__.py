"""
=============================================================================
MIDDLEWARE FRAMEWORK
=============================================================================

Middleware is code that runs between receiving a request and calling
the final handler, and again on the way back out.

    Incoming Request
         │
         ▼
    ┌──────────────────┐
    │ LoggingMiddleware │ ──► access log line, X-Request-ID
    └────────┬─────────┘
             ▼
    ┌──────────────────┐
    │ HXMiddleware      │ ──► per-request hx header record, flushed once
    └────────┬─────────┘     (hxserver.htmx.middleware)
             ▼
    ┌──────────────────┐
    │ Your Handler      │ ──► sets hx directives, returns HTML
    └──────────────────┘

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler, FunctionMiddleware, function_middleware
from .logging import LoggingMiddleware

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "FunctionMiddleware",
    "function_middleware",

    # Built-in middleware
    "LoggingMiddleware",
]
