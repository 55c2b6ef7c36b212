from __future__ import annotations

import logging

from backend.bridge.models.results import CaptionResult, ChannelResult, VideoResult
from backend.bridge.services.channel_tabs import ChannelTabResolver
from backend.bridge.services.errors import ArgumentError, ProviderUnavailableError
from backend.bridge.services.field_extractors import extract_caption_track, extract_items
from backend.bridge.services.normalization import (
    DEFAULT_WEB_ORIGIN,
    items_to_channels,
    items_to_videos,
    normalize_channel_url,
    rank_by_recency,
)
from backend.bridge.services.provider_gateway import ProviderContext, trigger_fetch

LOGGER = logging.getLogger("newstube.extractor")


class ExtractorService:
    """Synchronous bodies of the four operations; callers decide where they run."""

    def __init__(
        self,
        provider: ProviderContext | None,
        *,
        origin: str = DEFAULT_WEB_ORIGIN,
    ) -> None:
        self._provider = provider
        self._origin = origin

    @property
    def provider_available(self) -> bool:
        return self._provider is not None

    def get_captions(self, url: str, prefer_lang: str) -> CaptionResult:
        if not url.strip():
            raise ArgumentError("url must not be blank.")
        provider = self._require_provider()
        stream_info = provider.fetch_stream_info(url.strip())
        match = extract_caption_track(stream_info, prefer_lang)
        if match is None:
            return CaptionResult.missing()
        return CaptionResult(has_captions=True, caption_url=match.url, caption_lang=match.language)

    def search_videos(self, query: str) -> list[VideoResult]:
        if not query.strip():
            return []
        items = self._search_items(query)
        return rank_by_recency(items_to_videos(items, origin=self._origin))

    def search_channels(self, query: str) -> list[ChannelResult]:
        if not query.strip():
            return []
        return items_to_channels(self._search_items(query), origin=self._origin)

    def get_channel_videos(self, channel_url: str, limit: int) -> list[VideoResult]:
        if not channel_url.strip():
            raise ArgumentError("channelUrl must not be blank.")
        provider = self._require_provider()
        canonical_url = normalize_channel_url(channel_url, origin=self._origin)
        resolver = ChannelTabResolver(provider, origin=self._origin)
        return resolver.resolve(canonical_url, limit)

    def _search_items(self, query: str) -> list[object]:
        provider = self._require_provider()
        extractor = provider.create_search_extractor(query)
        if not trigger_fetch(extractor):
            LOGGER.debug("search extractor exposes no fetch step; assuming populated")
        search_info = provider.fetch_search_info(extractor)
        return extract_items(search_info)

    def _require_provider(self) -> ProviderContext:
        if self._provider is None:
            raise ProviderUnavailableError("Provider is not initialized.")
        return self._provider
