"""
Exceptions raised by the hx header layer.

    HXError
    ├── HXEncodingError             payload can't be turned into JSON
    └── MiddlewareNotInstalledError response headers looked up without
                                    HXMiddleware in the pipeline
"""


class HXError(Exception):
    """Base class for hx header errors."""


class HXEncodingError(HXError, ValueError):
    """
    Raised when a user payload can't be encoded for the wire.

    Raised synchronously by the setter that received the payload; the
    record keeps its previous value for that field.

    Attributes:
        field: The wire header and sub-field, e.g. "HX-Location: values"
               or "HX-Trigger: reload-nav".
    """

    def __init__(self, field: str, cause: Exception):
        super().__init__(f"{field}: {cause}")
        self.field = field
        self.cause = cause


class MiddlewareNotInstalledError(HXError, RuntimeError):
    """
    Raised when hx response headers are requested for a request that
    never went through HXMiddleware.

    This is a wiring bug, not a runtime condition: without the middleware
    nothing would ever flush the headers, so every directive set by the
    handler would be dropped silently.
    """

    def __init__(self):
        super().__init__(
            "no hx response headers attached to this request; "
            "add HXMiddleware to the pipeline before handlers that set them"
        )
