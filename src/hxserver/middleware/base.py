"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Defines the middleware protocol and the pipeline for chaining middleware
(Chain of Responsibility).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Request ────────────────────────────────────────────────►         │
    │                                                                      │
    │   ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────┐     │
    │   │ Logging  │───►│    HX    │───►│   Auth   │───►│ Handler  │     │
    │   └────┬─────┘    └────┬─────┘    └────┬─────┘    └────┬─────┘     │
    │        ▼               ▼               ▼               ▼            │
    │   [before]        [before]        [before]          [exec]          │
    │   start timer     bind hx         may set a         sets hx         │
    │                   record          default           directives      │
    │                                   HX-Retarget       and returns     │
    │        ▲               ▲               ▲               │            │
    │   [after]         [after]         [after]              │            │
    │   log line        flush hx                             │            │
    │                   headers                              │            │
    │                                                                      │
    │   ◄──────────────────────────────────────────────── Response        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A handler returns either an HTTPResponse, which the server then writes,
or None after writing the response itself through request.writer.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The next middleware or the final handler.
NextHandler = Callable[[HTTPRequest], Optional[HTTPResponse]]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    Anatomy:

        class DefaultTarget(Middleware):
            def __call__(self, request, next):
                # PRE-PROCESSING: runs before the handler
                retarget(request, "#main")

                # CALL NEXT: skip it to short-circuit
                response = next(request)

                # POST-PROCESSING: runs after the handler
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> Optional[HTTPResponse]:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain (call this to continue!)

        Returns:
            The response from next(), a short-circuit response, or None
            if the response was written through request.writer.
        """

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains multiple middleware together with a final handler.

    First added = outermost:

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        pipeline.add(HXMiddleware())

        handler = pipeline.wrap(app)   # Logging(HX(app))
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Add middleware to the pipeline. Returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """
        Add multiple middleware at once.

        Example:
            pipeline.use(LoggingMiddleware(), HXMiddleware())
        """
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with all middleware in the pipeline.

        Given [MW1, MW2, MW3] the result is MW1 → MW2 → MW3 → handler.
        We wrap in reverse order so the first-added middleware ends up
        outermost.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        """Create a closure that calls middleware with next_handler."""
        def wrapped(request: HTTPRequest) -> Optional[HTTPResponse]:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)


# =============================================================================
# FUNCTION MIDDLEWARE
# =============================================================================

class FunctionMiddleware(Middleware):
    """
    Wraps a plain function as middleware.

    Usage:
        def default_swap(request, next):
            reswap(request, SwapStrategy.OUTER_HTML)
            return next(request)

        pipeline.add(FunctionMiddleware(default_swap))
    """

    def __init__(
        self,
        func: Callable[[HTTPRequest, NextHandler], Optional[HTTPResponse]],
        name: Optional[str] = None
    ):
        self._func = func
        self._name = name or func.__name__

    def __call__(self, request: HTTPRequest, next: NextHandler) -> Optional[HTTPResponse]:
        return self._func(request, next)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(
    func: Callable[[HTTPRequest, NextHandler], Optional[HTTPResponse]]
) -> FunctionMiddleware:
    """
    Decorator to create middleware from a function.

    Usage:
        @function_middleware
        def no_history(request, next):
            prevent_push_url(request)
            return next(request)

        pipeline.add(no_history)
    """
    return FunctionMiddleware(func)
