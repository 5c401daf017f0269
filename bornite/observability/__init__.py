from .logging import BorniteLoggerAdapter, configure_logging, get_bornite_logger
from .metrics import MetricsCollector, format_snapshot, get_metrics_collector

__all__ = [
    "BorniteLoggerAdapter",
    "configure_logging",
    "get_bornite_logger",
    "MetricsCollector",
    "format_snapshot",
    "get_metrics_collector",
]
