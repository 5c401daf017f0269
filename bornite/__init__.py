from .clients import Client
from .core import RequestExecutor
from .models import (
    Response,
    RequestSettings,
    UNLIMITED,
    Payload,
    TextPayload,
    BytesPayload,
    JsonPayload,
    FormPayload,
    StreamPayload,
)
from .exceptions import (
    # Base exceptions
    BorniteError,
    # Validation errors
    ValidationError,
    InvalidURLError,
    InvalidOptionsError,
    # Transport errors
    TransportError,
    ConnectionError,
    TimeoutError,
    # Redirect errors
    RedirectError,
    RedirectLimitExceeded,
    MissingRedirectLocation,
    StreamPayloadOnRedirect,
    # Content errors
    ContentError,
    PayloadTooLarge,
    DecompressionError,
    JsonParseError,
    # Status errors
    StatusValidationFailed,
)
from .observability.logging import configure_logging
from .observability.metrics import (
    MetricsCollector,
    MetricsSnapshot,
    RequestMetrics,
    get_metrics_collector,
    format_snapshot,
)

# Module-level API, backed by a client without defaults.
_default_client = Client()

request = _default_client.request
get = _default_client.get
post = _default_client.post
put = _default_client.put
patch = _default_client.patch
delete = _default_client.delete
custom = _default_client.custom


__all__ = [
    # Request API
    "request",
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "custom",
    "Client",
    "RequestExecutor",

    # Models
    "Response",
    "RequestSettings",
    "UNLIMITED",
    "Payload",
    "TextPayload",
    "BytesPayload",
    "JsonPayload",
    "FormPayload",
    "StreamPayload",

    # Logging and metrics
    "configure_logging",
    "MetricsCollector",
    "MetricsSnapshot",
    "RequestMetrics",
    "get_metrics_collector",
    "format_snapshot",

    # Base exceptions
    "BorniteError",
    # Validation errors
    "ValidationError",
    "InvalidURLError",
    "InvalidOptionsError",
    # Transport errors
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    # Redirect errors
    "RedirectError",
    "RedirectLimitExceeded",
    "MissingRedirectLocation",
    "StreamPayloadOnRedirect",
    # Content errors
    "ContentError",
    "PayloadTooLarge",
    "DecompressionError",
    "JsonParseError",
    # Status errors
    "StatusValidationFailed",
]
