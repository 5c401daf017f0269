from __future__ import annotations
import time
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core import RequestExecutor
from ..exceptions import BorniteError, InvalidOptionsError, InvalidURLError
from ..models.metrics import RequestMetrics
from ..models.results import Response
from ..observability.logging import BorniteLoggerAdapter, get_bornite_logger
from ..observability.metrics import MetricsCollector
from ..options import build_settings, check_known, merge_options


class Client:
    """
    Request client carrying a layer of default options.

    Responsibilities:
      - Merge instance defaults with call-site options and validate them
      - Run the logical call through RequestExecutor
      - Verb shortcuts (get/post/put/patch/delete)
      - Derivative clients via custom()
      - Optional per-call metrics

    Example:
        api = Client().custom(base_url="https://api.example.com/v1/", redirects=3)
        response = await api.get("users/42")
        print(response.payload)
    """

    def __init__(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        *,
        logger: Optional[BorniteLoggerAdapter] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        defaults = dict(defaults or {})
        check_known(defaults)
        self._defaults = defaults
        self._logger = logger
        self._metrics = metrics

    @property
    def defaults(self) -> dict:
        return dict(self._defaults)

    def custom(self, **options: Any) -> "Client":
        """
        Create a client whose defaults are this client's defaults overlaid with ``options``.

        Headers are merged name by name; every other option is replaced.
        """
        if not options:
            raise InvalidOptionsError(message="custom() requires at least one option")
        check_known(options)
        return Client(
            merge_options(self._defaults, options),
            logger=self._logger,
            metrics=self._metrics,
        )

    async def request(self, url: str, **options: Any) -> Response:
        """
        Perform a logical call.

        Args:
            url: Absolute URL, or a URL relative to the base_url option
            **options: Request options (method, headers, payload, redirects, ...)

        Returns:
            Response of the final hop

        Raises:
            ValidationError: For a non-string URL or invalid options (no request is sent)
            TransportError, RedirectError, ContentError, StatusValidationFailed:
                See RequestExecutor.execute
        """
        if not isinstance(url, str):
            raise InvalidURLError(message=f"URL must be a string, got {type(url).__name__}", url=None)

        settings = build_settings(merge_options(self._defaults, options))

        start = time.perf_counter()
        try:
            response = await self._executor().execute(url, settings)
        except BorniteError as exc:
            self._record(url, settings.method, start, error=exc)
            raise
        self._record(url, settings.method, start, response=response)
        return response

    def _executor(self) -> RequestExecutor:
        # Resolved per call so configure_logging also reaches existing clients.
        return RequestExecutor(logger=self._logger or get_bornite_logger(__name__))

    async def _shortcut(self, method: str, url: str, options: Mapping[str, Any]) -> Response:
        if "method" in options:
            raise InvalidOptionsError(
                message="Option method is not allowed",
                option_name="method",
                option_value=options["method"],
            )
        return await self.request(url, **options, method=method)

    async def get(self, url: str, **options: Any) -> Response:
        return await self._shortcut("GET", url, options)

    async def post(self, url: str, **options: Any) -> Response:
        return await self._shortcut("POST", url, options)

    async def put(self, url: str, **options: Any) -> Response:
        return await self._shortcut("PUT", url, options)

    async def patch(self, url: str, **options: Any) -> Response:
        return await self._shortcut("PATCH", url, options)

    async def delete(self, url: str, **options: Any) -> Response:
        return await self._shortcut("DELETE", url, options)

    def _record(
        self,
        url: str,
        method: str,
        start: float,
        response: Optional[Response] = None,
        error: Optional[BorniteError] = None,
    ) -> None:
        if self._metrics is None:
            return
        failed = error.response if error is not None else None
        final = response or failed
        self._metrics.record_request(
            RequestMetrics(
                url=(final.url if final and final.url else url),
                method=method,
                status_code=final.status_code if final else None,
                duration_ms=(time.perf_counter() - start) * 1000,
                size_bytes=_payload_size(final),
                timestamp=datetime.now(),
                error=str(error) if error is not None else None,
                success=error is None,
                error_type=type(error).__name__ if error is not None else None,
                redirects=len(final.redirect_chain) if final else len(getattr(error, "redirect_chain", [])),
            )
        )


def _payload_size(response: Optional[Response]) -> int:
    if response is None or response.raw is None:
        return 0
    return response.raw.num_bytes_downloaded
