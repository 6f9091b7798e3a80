"""
=============================================================================
HX MIDDLEWARE (FLUSH COORDINATOR)
=============================================================================

Gives every request its own HXResponseHeaders record and writes the
record to the response headers exactly once, right before the response
is committed.

=============================================================================
LIFECYCLE OF ONE REQUEST
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   UNATTACHED ──── HXMiddleware.__call__ ────► ATTACHED(record)      │
    │                   binds a fresh record,          │      ▲           │
    │                   wraps request.writer           │      │ setters   │
    │                                                  │      │ (any      │
    │                                                  │──────┘ number)   │
    │                                                  │                   │
    │        first of:  writer.write(...)              │                   │
    │                   writer.write_header(...)       │                   │
    │                   writer.finish()                │                   │
    │                   handler chain returned         ▼                   │
    │                                              FLUSHED                 │
    │                                        serialize once, copy into    │
    │                                        the outgoing headers          │
    │                                                  │      ▲           │
    │                                                  └──────┘ every     │
    │                                                    later trigger    │
    │                                                    is a no-op       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY WRAP THE WRITER
=============================================================================

Headers can only change until the status line goes out. A handler that
streams a body in several writes would otherwise have no single place to
hook the header emission. HXResponseWriter sits in front of the real
writer and runs the flush on whichever entry point is hit first:

    handler ──► HXResponseWriter.write() ──► flush (first call only)
                                        └──► ResponseWriter.write()

Handlers that return an HTTPResponse instead of streaming don't touch
the writer at all. For them the flush happens when the chain returns to
the middleware, before the server writes the response out.

=============================================================================
AFTER THE FLUSH
=============================================================================

Setters keep working after the flush, and keep updating the record, but
the record is inert by then: its values were already copied into the
outgoing headers. Nothing checks or raises; there is nothing the caller
could do about it anyway once headers are on the wire.

=============================================================================
"""

from typing import Dict, List, MutableMapping, Optional, Union
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus
from ..http.writer import BaseResponseWriter
from ..middleware.base import Middleware, NextHandler
from .errors import MiddlewareNotInstalledError
from .headers import HXResponseHeaders, HX_REQUEST
from .serializer import add_headers


logger = logging.getLogger(__name__)


# Unique per process; nothing else can collide with it in request.context.
_RESPONSE_KEY = object()


def response_headers(request: HTTPRequest) -> HXResponseHeaders:
    """
    Return the hx response header record bound to this request.

    Raises:
        MiddlewareNotInstalledError: If HXMiddleware hasn't run for this
            request. Returning a fresh record here would look like it
            worked while every header set on it is thrown away.
    """
    try:
        return request.context[_RESPONSE_KEY]
    except KeyError:
        raise MiddlewareNotInstalledError() from None


def _add_vary(headers: MutableMapping[str, str]) -> None:
    """Append HX-Request to the Vary header, keeping existing entries."""
    existing = headers.get("Vary", "")
    tokens = [t.strip().lower() for t in existing.split(",") if t.strip()]

    if "*" in tokens or HX_REQUEST.lower() in tokens:
        return
    headers["Vary"] = f"{existing}, {HX_REQUEST}" if existing else HX_REQUEST


def _flush(
    record: HXResponseHeaders,
    headers: MutableMapping[str, str],
    vary: bool,
    replace: bool = True,
) -> List[str]:
    names = add_headers(record, headers, replace=replace)
    if vary:
        _add_vary(headers)
    logger.debug(f"Flushed hx headers: {', '.join(names) or '(none)'}")
    return names


class HXResponseWriter(BaseResponseWriter):
    """
    Writer wrapper that flushes the hx record before the first commit.

    Everything else is delegated to the wrapped writer, including
    attributes this class doesn't define (status, bytes_written, ...).

    Args:
        writer: The writer to wrap.
        record: The request's hx response headers.
        vary: Also add "Vary: HX-Request" on flush.
    """

    def __init__(
        self,
        writer: BaseResponseWriter,
        record: HXResponseHeaders,
        vary: bool = False,
    ):
        self.wrapped = writer
        self._record = record
        self._vary = vary
        self.flushed = False

    @property
    def headers(self) -> Dict[str, str]:
        return self.wrapped.headers

    @property
    def committed(self) -> bool:
        return self.wrapped.committed

    def flush_headers(self) -> bool:
        """
        Copy the record into the outgoing headers, once.

        Returns:
            True if this call did the flush, False if it had already
            happened.
        """
        if self.flushed:
            return False

        if self.wrapped.committed:
            logger.warning("Response committed before HXMiddleware could flush; hx headers dropped")
        else:
            _flush(self._record, self.wrapped.headers, self._vary)

        self.flushed = True
        return True

    def write_header(self, status: HTTPStatus = HTTPStatus.OK) -> None:
        self.flush_headers()
        self.wrapped.write_header(status)

    def write(self, data: Union[str, bytes]) -> int:
        self.flush_headers()
        return self.wrapped.write(data)

    def finish(self) -> None:
        self.flush_headers()
        self.wrapped.finish()

    def __getattr__(self, name: str):
        if name == "wrapped":
            raise AttributeError(name)
        return getattr(self.wrapped, name)


class HXMiddleware(Middleware):
    """
    Binds an HXResponseHeaders record to each request and flushes it.

    Place it before any middleware or handler that sets hx headers:

        server.use(LoggingMiddleware())
        server.use(HXMiddleware())       # everything after this may call
        server.use(AuthMiddleware())     # retarget(), trigger(), ...

    Installing it twice is harmless: the inner instance sees the record
    the outer one bound and passes the request straight through.

    Args:
        vary: Add "Vary: HX-Request" to every response, so shared caches
              keep full-page and fragment responses for the same URL
              apart.
    """

    def __init__(self, vary: bool = False):
        self.vary = vary

    def __call__(self, request: HTTPRequest, next: NextHandler) -> Optional[HTTPResponse]:
        if _RESPONSE_KEY in request.context:
            logger.debug(f"hx record already attached for {request.method} {request.path}")
            return next(request)

        record = HXResponseHeaders()
        request.context[_RESPONSE_KEY] = record

        writer: Optional[HXResponseWriter] = None
        if request.writer is not None:
            writer = HXResponseWriter(request.writer, record, vary=self.vary)
            request.writer = writer

        try:
            response = next(request)
        except Exception:
            # The error response must not carry directives meant for the
            # success path.
            if writer is not None and not writer.flushed:
                request.writer = writer.wrapped
            raise

        # End of chain: flush now if no write or commit did it already.
        if writer is not None:
            flushed_now = writer.flush_headers()
            if flushed_now and self.vary and response is not None and "Vary" in response.headers:
                # send_response copies the response's Vary over the merged one.
                _add_vary(response.headers)
        elif response is not None:
            # Headers the handler set on its response win, as on the writer path.
            _flush(record, response.headers, self.vary, replace=False)
        else:
            logger.warning(
                f"{request.method} {request.path}: handler returned no response "
                f"and there is no writer; hx headers dropped"
            )

        return response
