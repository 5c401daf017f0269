from .results import Response

from .config import (
    RequestSettings,
    UNLIMITED,
)

from .payloads import (
    Payload,
    TextPayload,
    BytesPayload,
    JsonPayload,
    FormPayload,
    StreamPayload,
    coerce_payload,
)

from .metrics import (
    RequestMetrics,
    MetricsSnapshot,
)

__all__ = [
    # Result Models
    "Response",

    # Config Models
    "RequestSettings",
    "UNLIMITED",

    # Payload Models
    "Payload",
    "TextPayload",
    "BytesPayload",
    "JsonPayload",
    "FormPayload",
    "StreamPayload",
    "coerce_payload",

    # Metrics Models
    "RequestMetrics",
    "MetricsSnapshot",
]
