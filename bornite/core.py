from __future__ import annotations
import dataclasses
import time
from typing import Optional

import httpx

from .models.config import BODYLESS_METHODS, RequestSettings
from .models.results import Response
from .exceptions import (
    BorniteError,
    JsonParseError,
    MissingRedirectLocation,
    RedirectLimitExceeded,
    StatusValidationFailed,
    StreamPayloadOnRedirect,
)
from .headers import drop_headers
from .redirects import redirect_method, resolve_location, resolve_url
from .streaming import GzipDecoder, read_body, should_decompress
from .transport import agent_scope, build_request, iter_raw, send
from .utils import interpret_content
from .observability.logging import (
    BorniteLoggerAdapter,
    get_bornite_logger,
    log_content_processing,
    log_exception,
    log_redirect,
)


class RequestExecutor:
    """
    Drives one logical call through as many hops as its redirects require.

    Each hop sends the request, asks the redirect table what to do with the
    status, and either moves on to the next URL with a fresh settings
    snapshot or reads, decodes and interprets the body of the final response.
    Every hop's response is closed before the next one starts and on every
    failure; a client opened for the call is closed when the call ends.

    Example:
        executor = RequestExecutor()
        response = await executor.execute(
            "https://example.com/api",
            build_settings({"method": "POST", "payload": {"a": 1}, "redirects": 3}),
        )
        print(response.status_code, response.payload)
    """

    def __init__(self, logger: Optional[BorniteLoggerAdapter] = None):
        self._logger = logger or get_bornite_logger(__name__)

    async def execute(self, url: str, settings: RequestSettings) -> Response:
        """
        Run the logical call and return its final Response.

        Raises:
            InvalidURLError: When the URL (or a redirect Location) is not http(s)
            TransportError: For connection, timeout and other transport failures
            RedirectLimitExceeded: When a redirect arrives with no budget left
            MissingRedirectLocation: When a redirect has no Location header
            StreamPayloadOnRedirect: When a stream payload would be resent
            PayloadTooLarge: When the decoded body exceeds max_bytes
            DecompressionError: When a gzip body is corrupt
            JsonParseError: When a JSON body does not parse
            StatusValidationFailed: When validate_status rejects the final status
        """
        current_url = resolve_url(url, settings.base_url)
        remaining = settings.redirects
        redirect_chain: list[str] = []
        start = time.perf_counter()

        self._logger.info("request.started", method=settings.method, url=str(current_url))

        try:
            async with agent_scope(settings.agent) as client:
                while True:
                    request = build_request(current_url, settings)
                    resp = await send(client, request, settings.timeout)
                    try:
                        next_method = redirect_method(resp.status_code, settings.method, settings.redirect_method)
                        if next_method is None or not settings.follows_redirects:
                            result = await self._read_response(resp, settings, current_url, redirect_chain)
                            break

                        if remaining == 0:
                            raise RedirectLimitExceeded(
                                message="",
                                url=str(current_url),
                                max_redirects=settings.redirects,
                                redirect_chain=redirect_chain,
                            )

                        location = resp.headers.get("location")
                        if not location:
                            raise MissingRedirectLocation(
                                message="",
                                url=str(current_url),
                                status_code=resp.status_code,
                                redirect_chain=redirect_chain,
                            )
                        next_url = resolve_location(current_url, location)
                        settings = self._next_hop_settings(settings, next_method)
                        if settings.payload is not None and not settings.payload.replayable:
                            raise StreamPayloadOnRedirect(
                                message="",
                                url=str(current_url),
                                redirect_chain=redirect_chain,
                            )
                    finally:
                        await resp.aclose()

                    remaining -= 1
                    redirect_chain.append(str(next_url))
                    log_redirect(
                        self._logger,
                        from_url=str(current_url),
                        to_url=str(next_url),
                        status_code=resp.status_code,
                        redirect_count=len(redirect_chain),
                        next_method=next_method,
                    )
                    current_url = next_url
        except BorniteError as exc:
            log_exception(
                self._logger,
                exc,
                "request.failed",
                method=settings.method,
                url=str(current_url),
                redirect_count=len(redirect_chain),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        self._logger.info(
            "request.completed",
            method=settings.method,
            url=str(current_url),
            status_code=result.status_code,
            redirect_count=len(redirect_chain),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return result

    @staticmethod
    def _next_hop_settings(settings: RequestSettings, method: str) -> RequestSettings:
        """Settings snapshot for the hop that follows a redirect."""
        if method in BODYLESS_METHODS:
            return dataclasses.replace(
                settings,
                method=method,
                payload=None,
                headers=drop_headers(settings.headers, "content-length", "content-type"),
            )
        return dataclasses.replace(settings, method=method)

    async def _read_response(
        self,
        resp: httpx.Response,
        settings: RequestSettings,
        url: httpx.URL,
        redirect_chain: list[str],
    ) -> Response:
        """Decode the final hop's body and build the Response."""
        content_encoding = resp.headers.get("content-encoding")
        content_type = resp.headers.get("content-type")

        decoder = None
        if should_decompress(settings.gzip, settings.method, resp.status_code, content_encoding):
            decoder = GzipDecoder(content_encoding.strip().lower(), url=str(url))

        body = await read_body(
            iter_raw(resp, settings.timeout),
            max_bytes=settings.max_bytes,
            decoder=decoder,
            url=str(url),
        )
        if decoder is not None:
            log_content_processing(
                self._logger,
                operation="decompress",
                content_type=content_type,
                size_bytes=len(body),
                compression=decoder.encoding,
                url=str(url),
            )

        result = Response(
            headers=dict(resp.headers),
            status_code=resp.status_code,
            status_message=resp.reason_phrase,
            raw=resp,
            url=str(url),
            redirect_chain=list(redirect_chain),
        )

        try:
            result.payload = interpret_content(body, content_type, binary=settings.binary)
        except JsonParseError as exc:
            result.payload = exc.body
            exc.url = str(url)
            exc.response = result
            raise

        log_content_processing(
            self._logger,
            operation="parse",
            content_type=content_type,
            size_bytes=len(body),
            payload_type=type(result.payload).__name__,
            url=str(url),
        )

        if not settings.accepts_status(resp.status_code):
            raise StatusValidationFailed(
                message="",
                url=str(url),
                response=result,
                status_code=resp.status_code,
            )
        return result
