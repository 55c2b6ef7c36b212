from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from backend.bridge.services.capability_prober import invoke_first, resolve_path
from backend.bridge.services.errors import (
    ProviderCapabilityError,
    ProviderUnavailableError,
    summarize_exception_message,
)
from backend.bridge.services.transport import HttpDownloader

LOGGER = logging.getLogger("newstube.provider")

INITIALIZER_PATHS: tuple[str, ...] = ("NewPipe.init", "init", "initialize")
RESPONSE_CLASS_PATHS: tuple[str, ...] = ("downloader.Response",)
SERVICE_CONTAINER_PATHS: tuple[str, ...] = ("ServiceList", "service_list", "services")
CHANNEL_INFO_PATHS: tuple[str, ...] = ("channel.ChannelInfo.getInfo",)
CHANNEL_TAB_INFO_PATHS: tuple[str, ...] = (
    "channel.tabs.ChannelTabInfo.getInfo",
    "channel.ChannelTabInfo.getInfo",
)
STREAM_INFO_PATHS: tuple[str, ...] = ("stream.StreamInfo.getInfo",)
SEARCH_INFO_PATHS: tuple[str, ...] = ("search.SearchInfo.getInfo",)
SEARCH_EXTRACTOR_FACTORIES: tuple[str, ...] = ("getSearchExtractor", "searchExtractor")
FETCH_TRIGGERS: tuple[str, ...] = ("fetchPage", "fetch")


@dataclass(frozen=True)
class ProviderContext:
    """
    Process-scoped handle on an initialised provider library.

    Built once at startup and shared read-only by every operation; all entry
    points are located by probing because their names drift between releases.
    """

    module: Any
    service: Any
    downloader: HttpDownloader | None = None

    def fetch_channel_info(self, channel_url: str) -> Any:
        entry_point = _first_entry_point(self.module, CHANNEL_INFO_PATHS)
        if entry_point is None:
            raise ProviderCapabilityError("Channel info entry point not found on provider.")
        return entry_point(self.service, channel_url)

    def fetch_channel_tab_info(self, tab_url: str) -> Any | None:
        for path in CHANNEL_TAB_INFO_PATHS:
            entry_point = resolve_path(self.module, path)
            if entry_point is None or not callable(entry_point):
                continue
            try:
                return entry_point(self.service, tab_url)
            except Exception:
                LOGGER.debug("channel tab info entry point failed path=%s", path, exc_info=True)
        return None

    def fetch_stream_info(self, url: str) -> Any:
        entry_point = _first_entry_point(self.module, STREAM_INFO_PATHS)
        if entry_point is None:
            raise ProviderCapabilityError("Stream info entry point not found on provider.")
        return entry_point(self.service, url)

    def create_search_extractor(self, query: str) -> Any:
        found, extractor = invoke_first(self.service, SEARCH_EXTRACTOR_FACTORIES, query)
        if not found or extractor is None:
            raise ProviderCapabilityError("Could not create a search extractor for the query.")
        return extractor

    def fetch_search_info(self, extractor: Any) -> Any:
        entry_point = _first_entry_point(self.module, SEARCH_INFO_PATHS)
        if entry_point is None:
            raise ProviderCapabilityError("Search info entry point not found on provider.")
        return entry_point(extractor)


def trigger_fetch(extractor: Any) -> bool:
    """Run `fetchPage()` or `fetch()`; an extractor exposing neither may already be populated."""
    found, _ = invoke_first(extractor, FETCH_TRIGGERS)
    return found


def initialize_provider(
    *,
    module_path: str | None,
    service_name: str,
    downloader: HttpDownloader,
) -> ProviderContext:
    if module_path is None:
        raise ProviderUnavailableError("No provider module configured.")
    try:
        module = import_module(module_path)
    except Exception as exc:
        raise ProviderUnavailableError(f"Provider module {module_path!r} is not importable.") from exc
    return build_provider_context(module, service_name=service_name, downloader=downloader)


def build_provider_context(
    module: Any,
    *,
    service_name: str,
    downloader: HttpDownloader | None = None,
) -> ProviderContext:
    service = resolve_service(module, service_name)
    if service is None:
        raise ProviderUnavailableError(f"Provider service {service_name!r} not found.")

    if downloader is not None:
        response_class = _first_entry_point(module, RESPONSE_CLASS_PATHS)
        if response_class is not None:
            downloader.set_response_factory(response_class)
        initializer = _first_entry_point(module, INITIALIZER_PATHS)
        if initializer is None:
            LOGGER.warning("provider exposes no initializer; continuing without downloader")
        else:
            try:
                initializer(downloader)
            except Exception as exc:
                raise ProviderUnavailableError(
                    f"Provider initialization failed: {summarize_exception_message(exc)}"
                ) from exc
            LOGGER.info("provider initialized module=%s service=%s", _module_name(module), service_name)

    return ProviderContext(module=module, service=service, downloader=downloader)


def resolve_service(module: Any, service_name: str) -> Any | None:
    for container_path in SERVICE_CONTAINER_PATHS:
        service = resolve_path(module, f"{container_path}.{service_name}")
        if service is not None:
            return service
    return resolve_path(module, service_name)


def _first_entry_point(module: Any, paths: tuple[str, ...]) -> Any | None:
    for path in paths:
        entry_point = resolve_path(module, path)
        if entry_point is not None and callable(entry_point):
            return entry_point
    return None


def _module_name(module: Any) -> str:
    return str(getattr(module, "__name__", type(module).__name__))
