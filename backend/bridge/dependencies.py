from __future__ import annotations

import logging
from functools import lru_cache

from backend.bridge.config import BridgeSettings, load_settings
from backend.bridge.services.errors import ProviderUnavailableError
from backend.bridge.services.extractor_service import ExtractorService
from backend.bridge.services.method_dispatcher import MethodDispatcher
from backend.bridge.services.provider_gateway import ProviderContext, initialize_provider
from backend.bridge.services.transport import HttpDownloader
from backend.bridge.telemetry import TelemetryClient, build_telemetry_client

LOGGER = logging.getLogger("newstube.dependencies")


@lru_cache(maxsize=1)
def get_settings() -> BridgeSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_downloader() -> HttpDownloader:
    settings = get_settings()
    return HttpDownloader(timeout_seconds=settings.http_timeout_seconds)


@lru_cache(maxsize=1)
def get_provider_context() -> ProviderContext | None:
    settings = get_settings()
    try:
        return initialize_provider(
            module_path=settings.provider_module,
            service_name=settings.provider_service,
            downloader=get_downloader(),
        )
    except ProviderUnavailableError as exc:
        LOGGER.warning("provider unavailable; provider-backed methods will fail error=%s", exc)
        return None


@lru_cache(maxsize=1)
def get_dispatcher() -> MethodDispatcher:
    settings = get_settings()
    return MethodDispatcher(
        extractor_service=ExtractorService(
            get_provider_context(),
            origin=settings.web_origin,
        ),
        default_prefer_lang=settings.default_prefer_lang,
        default_channel_limit=settings.default_channel_limit,
        error_message_max_length=settings.error_message_max_length,
        telemetry=get_telemetry(),
    )


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


def reset_cached_dependencies() -> None:
    if get_downloader.cache_info().currsize:
        get_downloader().close()
    get_dispatcher.cache_clear()
    get_provider_context.cache_clear()
    get_downloader.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()
