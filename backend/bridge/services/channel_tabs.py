from __future__ import annotations

import logging
from typing import Any

from backend.bridge.models.results import VideoResult
from backend.bridge.services.capability_prober import is_present, probe, probe_sequence, probe_string
from backend.bridge.services.field_extractors import extract_items, extract_title
from backend.bridge.services.normalization import (
    DEFAULT_WEB_ORIGIN,
    items_to_videos,
    rank_by_recency,
)
from backend.bridge.services.provider_gateway import ProviderContext, trigger_fetch

LOGGER = logging.getLogger("newstube.channel_tabs")

TAB_COLLECTION_ACCESSORS: tuple[str, ...] = ("tabs",)
TAB_NAME_ACCESSORS: tuple[str, ...] = ("name", "title")
TAB_URL_ACCESSORS: tuple[str, ...] = ("url", "tabUrl", "link")
TAB_EXTRACTOR_ACCESSORS: tuple[str, ...] = ("content", "tabExtractor")
VIDEO_TAB_KEYWORDS: tuple[str, ...] = ("video", "vídeo", "stream")


class ChannelTabResolver:
    """
    Turn a canonical channel URL into at most `limit` of its videos.

    Strategies run in order and the first non-empty list wins: no tabs ->
    channel items; chosen tab's URL -> tab info; tab's embedded extractor;
    finally the channel metadata items again, which always terminates.
    """

    def __init__(self, provider: ProviderContext, *, origin: str = DEFAULT_WEB_ORIGIN) -> None:
        self._provider = provider
        self._origin = origin

    def resolve(self, channel_url: str, limit: int) -> list[VideoResult]:
        channel_info = self._provider.fetch_channel_info(channel_url)
        channel_title = extract_title(channel_info) or ""

        tabs = probe_sequence(channel_info, TAB_COLLECTION_ACCESSORS)
        if not tabs:
            LOGGER.debug("channel has no tabs; using channel items url=%s", channel_url)
            return self._videos_from(channel_info, channel_title, limit)

        tab = select_video_tab(tabs)

        tab_url = probe_string(tab, TAB_URL_ACCESSORS)
        if tab_url is not None:
            tab_info = self._provider.fetch_channel_tab_info(tab_url)
            if tab_info is not None:
                videos = self._videos_from(tab_info, channel_title, limit)
                if videos:
                    return videos

        tab_extractor = probe(tab, TAB_EXTRACTOR_ACCESSORS, is_present)
        if tab_extractor is not None:
            trigger_fetch(tab_extractor)
            videos = self._videos_from(tab_extractor, channel_title, limit)
            if videos:
                return videos

        LOGGER.debug("tab strategies yielded nothing; using channel items url=%s", channel_url)
        return self._videos_from(channel_info, channel_title, limit)

    def _videos_from(self, source: Any, channel_title: str, limit: int) -> list[VideoResult]:
        videos = items_to_videos(
            extract_items(source),
            channel_fallback=channel_title,
            limit=limit,
            origin=self._origin,
        )
        return rank_by_recency(videos)


def select_video_tab(tabs: list[Any]) -> Any:
    for tab in tabs:
        name = (probe_string(tab, TAB_NAME_ACCESSORS) or "").lower()
        if any(keyword in name for keyword in VIDEO_TAB_KEYWORDS):
            return tab
    return tabs[0]
