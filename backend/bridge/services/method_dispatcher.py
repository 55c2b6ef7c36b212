from __future__ import annotations

import contextvars
import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, cast
from uuid import uuid4

from structlog.contextvars import bind_contextvars, reset_contextvars

from backend.bridge.models.method_contracts import (
    FAILURE_CODES,
    MethodCatalogEntry,
    MethodError,
    MethodName,
    MethodResponse,
)
from backend.bridge.services.errors import ArgumentError, summarize_exception_message
from backend.bridge.services.extractor_service import ExtractorService
from backend.bridge.telemetry import TelemetryClient

LOGGER = logging.getLogger("newstube.dispatcher")

METHOD_DESCRIPTIONS: dict[MethodName, str] = {
    "getCaptions": (
        "Locate a caption track for a video URL, preferring arguments.preferLang "
        "(prefix match, falls back to the first track)."
    ),
    "searchVideos": "Search videos by arguments.query, newest first; blank query returns [].",
    "searchChannels": "Search channels by arguments.query; blank query returns [].",
    "getChannelVideos": (
        "List up to arguments.limit videos of arguments.channelUrl "
        "(URL, channel id or @handle), newest first."
    ),
}

METHOD_ARGUMENTS: dict[MethodName, list[str]] = {
    "getCaptions": ["url", "preferLang"],
    "searchVideos": ["query"],
    "searchChannels": ["query"],
    "getChannelVideos": ["channelUrl", "limit"],
}


@dataclass(frozen=True)
class _PreparedCall:
    work: Callable[[], Any] | None = None
    immediate_result: Any = None


class MethodDispatcher:
    """
    Name-based entry point for the UI's method channel.

    `submit` validates arguments on the caller's thread (raising `ArgumentError`),
    then runs the operation on its own thread. The returned future always
    resolves with exactly one `MethodResponse` and never raises.
    """

    def __init__(
        self,
        *,
        extractor_service: ExtractorService,
        default_prefer_lang: str = "pt",
        default_channel_limit: int = 30,
        error_message_max_length: int = 220,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._extractor_service = extractor_service
        self._default_prefer_lang = default_prefer_lang
        self._default_channel_limit = max(1, default_channel_limit)
        self._error_message_max_length = max(16, error_message_max_length)
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()

    @property
    def provider_available(self) -> bool:
        return self._extractor_service.provider_available

    def list_methods(self) -> list[MethodCatalogEntry]:
        return [
            MethodCatalogEntry(
                name=name,
                description=description,
                arguments=list(METHOD_ARGUMENTS[name]),
            )
            for name, description in METHOD_DESCRIPTIONS.items()
        ]

    def submit(self, method: str, arguments: Mapping[str, Any]) -> Future[MethodResponse]:
        if method not in METHOD_DESCRIPTIONS:
            LOGGER.info("unrecognized method requested method=%s", method)
            return _completed(
                MethodResponse(ok=False, method=method, status="not_implemented")
            )

        method_name = cast(MethodName, method)
        prepared = self._prepare(method_name, arguments)
        if prepared.work is None:
            return _completed(
                MethodResponse(
                    ok=True,
                    method=method,
                    status="ok",
                    result=_render_result(prepared.immediate_result),
                )
            )

        future: Future[MethodResponse] = Future()
        # Request-scoped log context (http_request_id) follows the call onto its thread.
        caller_context = contextvars.copy_context()
        thread = threading.Thread(
            target=caller_context.run,
            args=(self._run, future, method_name, prepared.work),
            name=f"newstube-{method_name}",
            daemon=True,
        )
        thread.start()
        return future

    def execute(self, method: str, arguments: Mapping[str, Any]) -> MethodResponse:
        try:
            future = self.submit(method, arguments)
        except ArgumentError as exc:
            return argument_error_response(method, exc)
        return future.result()

    def _prepare(self, method: MethodName, arguments: Mapping[str, Any]) -> _PreparedCall:
        service = self._extractor_service
        if method == "getCaptions":
            url = _argument_str(arguments, "url")
            if not url:
                raise ArgumentError("url must not be blank.")
            prefer_lang = _argument_str(arguments, "preferLang") or self._default_prefer_lang
            return _PreparedCall(work=lambda: service.get_captions(url, prefer_lang))

        if method == "searchVideos":
            query = _argument_str(arguments, "query")
            if not query:
                return _PreparedCall(immediate_result=[])
            return _PreparedCall(work=lambda: service.search_videos(query))

        if method == "searchChannels":
            query = _argument_str(arguments, "query")
            if not query:
                return _PreparedCall(immediate_result=[])
            return _PreparedCall(work=lambda: service.search_channels(query))

        channel_url = _argument_str(arguments, "channelUrl")
        if not channel_url:
            raise ArgumentError("channelUrl must not be blank.")
        limit = _argument_int(arguments, "limit", self._default_channel_limit)
        return _PreparedCall(work=lambda: service.get_channel_videos(channel_url, limit))

    def _run(
        self,
        future: Future[MethodResponse],
        method: MethodName,
        work: Callable[[], Any],
    ) -> None:
        if not future.set_running_or_notify_cancel():
            return

        invocation_id = uuid4().hex
        code = FAILURE_CODES[method]
        context_tokens = bind_contextvars(method_name=method, method_invocation_id=invocation_id)
        try:
            with self._telemetry.span(
                "method.execute",
                error_code=code,
                method_name=method,
                invocation_id=invocation_id,
            ) as finish_attributes:
                rendered = _render_result(work())
                finish_attributes["outcome"] = "ok"
                finish_attributes["result_count"] = (
                    len(rendered) if isinstance(rendered, list) else 1
                )
        except Exception as exc:
            message = summarize_exception_message(exc, max_length=self._error_message_max_length)
            LOGGER.warning("method failed method=%s code=%s error=%s", method, code, message)
            future.set_result(
                MethodResponse(
                    ok=False,
                    method=method,
                    status="failed",
                    error=MethodError(code=code, message=message),
                )
            )
        else:
            future.set_result(MethodResponse(ok=True, method=method, status="ok", result=rendered))
        finally:
            reset_contextvars(**context_tokens)


def argument_error_response(method: str, exc: ArgumentError) -> MethodResponse:
    return MethodResponse(
        ok=False,
        method=method,
        status="failed",
        error=MethodError(code=ArgumentError.code, message=str(exc)),
    )


def _completed(response: MethodResponse) -> Future[MethodResponse]:
    future: Future[MethodResponse] = Future()
    future.set_result(response)
    return future


def _render_result(result: Any) -> Any:
    if isinstance(result, list):
        return [_render_result(item) for item in cast(list[Any], result)]
    to_payload = getattr(result, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    return result


def _argument_str(arguments: Mapping[str, Any], key: str) -> str:
    value = arguments.get(key)
    if isinstance(value, str):
        return value.strip()
    return ""


def _argument_int(arguments: Mapping[str, Any], key: str, default: int) -> int:
    value = arguments.get(key)
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default
