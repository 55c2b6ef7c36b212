from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from backend.bridge.services.capability_prober import (
    as_list,
    is_non_blank_string,
    is_present,
    is_sequence,
    probe,
)

LOGGER = logging.getLogger("newstube.transport")

DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded"
BODYLESS_METHODS: frozenset[str] = frozenset({"GET", "HEAD"})
REQUEST_METHOD_ACCESSORS: tuple[str, ...] = ("httpMethod", "method")
REQUEST_URL_ACCESSORS: tuple[str, ...] = ("url",)
REQUEST_HEADER_ACCESSORS: tuple[str, ...] = ("headers",)
REQUEST_BODY_ACCESSORS: tuple[str, ...] = (
    "dataToSend",
    "data",
    "postData",
    "body",
    "requestBody",
)

ResponseFactory = Callable[[int, str, dict[str, list[str]], str | None, str], Any]


class TransportError(Exception):
    pass


@dataclass(frozen=True)
class DownloaderResponse:
    status_code: int
    status_message: str
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: str | None = None
    final_url: str = ""


def _default_response_factory(
    status_code: int,
    status_message: str,
    headers: dict[str, list[str]],
    body: str | None,
    final_url: str,
) -> DownloaderResponse:
    return DownloaderResponse(
        status_code=status_code,
        status_message=status_message,
        headers=headers,
        body=body,
        final_url=final_url,
    )


class HttpDownloader:
    """
    Satisfies the provider's downloader contract over an httpx client.

    `execute` blocks the calling thread until the response (or a network fault)
    arrives; redirects are followed by the client.
    """

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        timeout_seconds: float | None = None,
        response_factory: ResponseFactory | None = None,
    ) -> None:
        if client is None:
            client_options: dict[str, Any] = {"follow_redirects": True}
            if timeout_seconds is not None:
                client_options["timeout"] = timeout_seconds
            client = httpx.Client(**client_options)
        self._client = client
        self._response_factory = response_factory or _default_response_factory

    def set_response_factory(self, response_factory: ResponseFactory | None) -> None:
        self._response_factory = response_factory or _default_response_factory

    def close(self) -> None:
        self._client.close()

    def execute(self, request: Any) -> Any:
        method = (probe(request, REQUEST_METHOD_ACCESSORS, is_non_blank_string) or "GET")
        method = str(method).strip().upper()
        url = probe(request, REQUEST_URL_ACCESSORS, is_non_blank_string)
        if url is None:
            raise TransportError("Downloader request has no target URL.")

        header_map = normalize_header_map(probe(request, REQUEST_HEADER_ACCESSORS, is_present))
        headers = [(name, value) for name, values in header_map.items() for value in values]

        content: bytes | None = None
        if method not in BODYLESS_METHODS:
            content_type = resolve_content_type(header_map)
            headers = [(name, value) for name, value in headers if name.lower() != "content-type"]
            headers.append(("Content-Type", content_type))
            content = extract_request_body(request) or b""

        LOGGER.debug("downloader request method=%s url=%s", method, url)
        try:
            response = self._client.request(method, str(url).strip(), headers=headers, content=content)
        except httpx.HTTPError as exc:
            raise TransportError(f"Downloader request failed: {exc}") from exc

        body = response.text if response.content else None
        return self._response_factory(
            response.status_code,
            response.reason_phrase,
            response_header_map(response.headers),
            body,
            str(response.url),
        )


def normalize_header_map(raw_headers: Any) -> dict[str, list[str]]:
    """Header multimap as `{name: [values...]}`; scalar values become one-item lists."""
    if not isinstance(raw_headers, Mapping):
        return {}
    normalized: dict[str, list[str]] = {}
    for raw_name, raw_values in raw_headers.items():
        name = str(raw_name)
        if is_sequence(raw_values):
            values = [str(value) for value in as_list(raw_values)]
        elif raw_values is None:
            values = []
        else:
            values = [str(raw_values)]
        normalized.setdefault(name, []).extend(values)
    return normalized


def resolve_content_type(header_map: Mapping[str, list[str]]) -> str:
    for name, values in header_map.items():
        if name.lower() != "content-type":
            continue
        if values and values[0].strip():
            return values[0].strip()
        break
    return DEFAULT_CONTENT_TYPE


def extract_request_body(request: Any) -> bytes | None:
    payload = probe(request, REQUEST_BODY_ACCESSORS, _is_body_payload)
    if payload is None:
        return None
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def response_header_map(headers: httpx.Headers) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for name, value in headers.multi_items():
        grouped.setdefault(name, []).append(value)
    return grouped


def _is_body_payload(value: Any) -> bool:
    return isinstance(value, bytes | bytearray | memoryview | str)
