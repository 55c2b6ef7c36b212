from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from backend.bridge.models.results import ChannelResult, VideoResult
from backend.bridge.services.field_extractors import (
    extract_published_millis,
    extract_published_text,
    extract_thumbnail_url,
    extract_title,
    extract_uploader,
    extract_url,
)

DEFAULT_WEB_ORIGIN = "https://www.youtube.com"
VIDEO_URL_MARKERS: tuple[str, ...] = ("watch", "youtu.be")
CHANNEL_URL_MARKERS: tuple[str, ...] = ("/channel/", "/@", "/user/", "/c/")
CHANNEL_ID_PREFIX = "UC"
CHANNEL_ID_MIN_LENGTH = 11


def canonicalize_video_url(url: str, *, origin: str = DEFAULT_WEB_ORIGIN) -> str:
    value = url.strip()
    if _is_absolute(value):
        return value
    if value.startswith("/"):
        return f"{origin}{value}"
    return f"{origin}/{value}"


def normalize_channel_url(value: str, *, origin: str = DEFAULT_WEB_ORIGIN) -> str:
    """Channel URL, bare `UC...` channel id, `@handle` or slug -> absolute channel URL."""
    stripped = value.strip()
    if not stripped:
        return stripped
    if _is_absolute(stripped):
        return stripped
    if stripped.startswith(CHANNEL_ID_PREFIX) and len(stripped) >= CHANNEL_ID_MIN_LENGTH:
        return f"{origin}/channel/{stripped}"
    return f"{origin}/{stripped.lstrip('/')}"


def is_video_like(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in VIDEO_URL_MARKERS)


def is_channel_like(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in CHANNEL_URL_MARKERS)


def rank_by_recency(videos: Iterable[VideoResult]) -> list[VideoResult]:
    """
    Newest first. Known timestamps (> 0) always precede unknown ones; unknown
    entries keep their incoming relative order.
    """
    return sorted(videos, key=_recency_key)


def items_to_videos(
    items: Iterable[Any],
    *,
    channel_fallback: str | None = None,
    limit: int | None = None,
    origin: str = DEFAULT_WEB_ORIGIN,
) -> list[VideoResult]:
    videos: list[VideoResult] = []
    if limit is not None and limit <= 0:
        return videos

    for item in items:
        if limit is not None and len(videos) >= limit:
            break
        video = item_to_video(item, channel_fallback=channel_fallback, origin=origin)
        if video is not None:
            videos.append(video)
    return videos


def item_to_video(
    item: Any,
    *,
    channel_fallback: str | None = None,
    origin: str = DEFAULT_WEB_ORIGIN,
) -> VideoResult | None:
    raw_url = extract_url(item)
    if raw_url is None:
        return None
    video_url = canonicalize_video_url(raw_url, origin=origin)
    if not is_video_like(video_url):
        return None

    title = extract_title(item)
    if title is None:
        return None
    channel = extract_uploader(item, default=channel_fallback)
    if channel is None:
        return None

    return VideoResult(
        video_url=video_url,
        title=title,
        channel=channel,
        thumb=extract_thumbnail_url(item),
        published_millis=extract_published_millis(item),
        published_text=extract_published_text(item),
    )


def items_to_channels(
    items: Iterable[Any],
    *,
    origin: str = DEFAULT_WEB_ORIGIN,
) -> list[ChannelResult]:
    channels: list[ChannelResult] = []
    for item in items:
        raw_url = extract_url(item)
        if raw_url is None:
            continue
        channel_url = normalize_channel_url(raw_url, origin=origin)
        if not is_channel_like(channel_url):
            continue
        title = extract_title(item)
        if title is None:
            continue
        channels.append(
            ChannelResult(
                channel_url=channel_url,
                title=title,
                thumb=extract_thumbnail_url(item),
            )
        )
    return channels


def _recency_key(video: VideoResult) -> tuple[int, int]:
    if video.published_millis > 0:
        return (0, -video.published_millis)
    return (1, 0)


def _is_absolute(value: str) -> bool:
    return value.startswith(("http://", "https://"))
