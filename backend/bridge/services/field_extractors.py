from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend.bridge.services.capability_prober import (
    as_list,
    is_non_blank_string,
    is_non_empty_sequence,
    is_present,
    is_sequence,
    is_timestamp_like,
    probe,
    probe_sequence,
    probe_string,
    to_epoch_millis,
)

# Candidate order encodes provider-release preference; edit the tuples, not the code paths.
URL_ACCESSORS: tuple[str, ...] = ("url",)
TITLE_ACCESSORS: tuple[str, ...] = ("name",)
UPLOADER_ACCESSORS: tuple[str, ...] = ("uploaderName",)
THUMBNAIL_COLLECTION_ACCESSORS: tuple[str, ...] = ("thumbnails",)
THUMBNAIL_URL_ACCESSORS: tuple[str, ...] = ("url",)
LEGACY_THUMBNAIL_ACCESSORS: tuple[str, ...] = ("thumbnailUrl",)
PUBLISHED_TIMESTAMP_ACCESSORS: tuple[str, ...] = (
    "uploadDate",
    "publishDate",
    "publishedDate",
    "date",
)
PUBLISHED_TEXT_ACCESSORS: tuple[str, ...] = (
    "textualUploadDate",
    "textualPublishDate",
    "uploadDate",
    "publishDate",
)
ITEM_COLLECTION_ACCESSORS: tuple[str, ...] = (
    "items",
    "relatedItems",
    "streams",
    "videoStreams",
)
CAPTION_CONTAINER_ACCESSORS: tuple[str, ...] = (
    "subtitles",
    "subtitleTracks",
    "captions",
    "closedCaptions",
    "subtitlesDefault",
)
CAPTION_NESTED_TRACK_ACCESSORS: tuple[str, ...] = (
    "availableTracks",
    "tracks",
    "captionTracks",
    "subtitles",
)
CAPTION_LANGUAGE_ACCESSORS: tuple[str, ...] = ("languageCode", "lang", "language")
CAPTION_URL_ACCESSORS: tuple[str, ...] = ("url", "content", "captionUrl", "subtitleUrl")


@dataclass(frozen=True)
class CaptionTrackMatch:
    url: str
    language: str


def extract_url(obj: Any) -> str | None:
    return probe_string(obj, URL_ACCESSORS)


def extract_title(obj: Any) -> str | None:
    return probe_string(obj, TITLE_ACCESSORS)


def extract_uploader(obj: Any, default: str | None = None) -> str | None:
    uploader = probe_string(obj, UPLOADER_ACCESSORS)
    if uploader is not None:
        return uploader
    if default is None:
        return None
    return default.strip() or None


def extract_thumbnail_url(obj: Any) -> str:
    thumbnails = probe_sequence(obj, THUMBNAIL_COLLECTION_ACCESSORS)
    if thumbnails:
        first = thumbnails[0]
        if is_non_blank_string(first):
            return str(first).strip()
        url = probe_string(first, THUMBNAIL_URL_ACCESSORS)
        if url is not None:
            return url
        return ""
    return probe_string(obj, LEGACY_THUMBNAIL_ACCESSORS) or ""


def extract_published_millis(obj: Any) -> int:
    value = probe(obj, PUBLISHED_TIMESTAMP_ACCESSORS, is_timestamp_like)
    if value is None:
        return 0
    return to_epoch_millis(value)


def extract_published_text(obj: Any) -> str:
    return probe_string(obj, PUBLISHED_TEXT_ACCESSORS) or ""


def extract_items(obj: Any) -> list[Any]:
    """Item collection shared by search results, channel metadata and tab contents."""
    return probe_sequence(obj, ITEM_COLLECTION_ACCESSORS) or []


def extract_caption_track(stream_info: Any, prefer_lang: str) -> CaptionTrackMatch | None:
    """
    Locate a caption track on stream metadata.

    Each container is first treated as a track list itself; otherwise its nested
    track list is probed. The first container that yields a track with a URL wins.
    """
    for container_name in CAPTION_CONTAINER_ACCESSORS:
        container = probe(stream_info, (container_name,), is_present)
        if container is None:
            continue

        direct_tracks = as_list(container) if is_sequence(container) else []
        match = _match_from_tracks(direct_tracks, prefer_lang)
        if match is not None:
            return match

        if is_sequence(container):
            continue
        nested = probe(container, CAPTION_NESTED_TRACK_ACCESSORS, is_sequence)
        match = _match_from_tracks(as_list(nested), prefer_lang)
        if match is not None:
            return match
    return None


def pick_caption_track(tracks: list[Any], prefer_lang: str) -> Any:
    preferred = prefer_lang.strip().lower()
    for track in tracks:
        language = (caption_track_language(track) or "").lower()
        if language.startswith(preferred):
            return track
    return tracks[0]


def caption_track_language(track: Any) -> str | None:
    return probe_string(track, CAPTION_LANGUAGE_ACCESSORS)


def caption_track_url(track: Any) -> str | None:
    return probe_string(track, CAPTION_URL_ACCESSORS)


def _match_from_tracks(tracks: list[Any], prefer_lang: str) -> CaptionTrackMatch | None:
    if not is_non_empty_sequence(tracks):
        return None
    picked = pick_caption_track(tracks, prefer_lang)
    url = caption_track_url(picked)
    if url is None:
        return None
    return CaptionTrackMatch(url=url, language=caption_track_language(picked) or "")
