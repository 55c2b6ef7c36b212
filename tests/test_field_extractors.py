from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

from backend.bridge.services.field_extractors import (
    CaptionTrackMatch,
    extract_caption_track,
    extract_items,
    extract_published_millis,
    extract_published_text,
    extract_thumbnail_url,
    extract_uploader,
    pick_caption_track,
)


class _JvmList:
    """Sized and indexable, but not registered as a `Sequence`."""

    def __init__(self, *values: Any) -> None:
        self._values = list(values)

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> Any:
        return self._values[index]


def _track(language: str | None, url: str | None = None, **extra: Any) -> SimpleNamespace:
    return SimpleNamespace(languageCode=language, url=url, **extra)


def test_caption_track_prefers_language_prefix_match() -> None:
    stream_info = {
        "subtitles": [
            _track("en", "https://captions.test/en.vtt"),
            _track("pt-BR", "https://captions.test/pt.vtt"),
        ]
    }

    assert extract_caption_track(stream_info, "pt") == CaptionTrackMatch(
        url="https://captions.test/pt.vtt",
        language="pt-BR",
    )


def test_caption_track_falls_back_to_first_track_when_language_missing() -> None:
    stream_info = {
        "subtitles": [
            _track("en", "https://captions.test/en.vtt"),
            _track("pt-BR", "https://captions.test/pt.vtt"),
        ]
    }

    match = extract_caption_track(stream_info, "fr")

    assert match is not None
    assert match.url == "https://captions.test/en.vtt"
    assert match.language == "en"


def test_caption_track_reads_nested_track_lists() -> None:
    class _StreamInfo:
        def getClosedCaptions(self) -> SimpleNamespace:  # noqa: N802
            return SimpleNamespace(
                captionTracks=_JvmList(SimpleNamespace(lang="PT-pt", captionUrl="https://c.test/1"))
            )

    match = extract_caption_track(_StreamInfo(), "pt")

    assert match == CaptionTrackMatch(url="https://c.test/1", language="PT-pt")


def test_caption_track_skips_containers_without_usable_urls() -> None:
    stream_info = {
        "subtitles": [_track("pt", None)],
        "captions": [SimpleNamespace(language="es", content="https://c.test/es")],
    }

    match = extract_caption_track(stream_info, "pt")

    assert match == CaptionTrackMatch(url="https://c.test/es", language="es")


def test_caption_track_absent_when_stream_has_no_tracks() -> None:
    assert extract_caption_track({"subtitles": []}, "pt") is None
    assert extract_caption_track(SimpleNamespace(), "pt") is None


def test_pick_caption_track_is_case_insensitive() -> None:
    tracks = [_track("EN-us"), _track("De")]

    assert pick_caption_track(tracks, "de") is tracks[1]
    assert pick_caption_track(tracks, " en ") is tracks[0]


def test_thumbnail_url_variants() -> None:
    assert (
        extract_thumbnail_url({"thumbnails": [SimpleNamespace(url="https://i.test/a.jpg")]})
        == "https://i.test/a.jpg"
    )
    assert extract_thumbnail_url({"thumbnails": ["https://i.test/b.jpg"]}) == "https://i.test/b.jpg"
    assert extract_thumbnail_url({"thumbnailUrl": "https://i.test/c.jpg"}) == "https://i.test/c.jpg"
    assert extract_thumbnail_url({"thumbnails": [SimpleNamespace(height=90)]}) == ""
    assert extract_thumbnail_url({}) == ""


def test_published_fields_probe_candidates_in_order() -> None:
    moment = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    item = {
        "uploadDate": None,
        "publishDate": moment,
        "textualUploadDate": "2 days ago",
    }

    assert extract_published_millis(item) == int(moment.timestamp() * 1000)
    assert extract_published_text(item) == "2 days ago"
    assert extract_published_millis({"date": 1_700_000_000_000}) == 1_700_000_000_000
    assert extract_published_millis({"uploadDate": "yesterday"}) == 0
    assert extract_published_text({}) == ""


def test_uploader_uses_default_only_when_provider_has_none() -> None:
    assert extract_uploader({"uploaderName": "  Folha "}, default="Fallback") == "Folha"
    assert extract_uploader({"uploaderName": " "}, default="Fallback") == "Fallback"
    assert extract_uploader({}, default="  ") is None
    assert extract_uploader({}) is None


def test_extract_items_accepts_bridged_lists_and_skips_empty_collections() -> None:
    first = {"url": "a"}
    second = {"url": "b"}

    assert extract_items({"items": [], "relatedItems": _JvmList(first, None, second)}) == [
        first,
        second,
    ]
    assert extract_items({"streams": "not-a-list"}) == []
    assert extract_items(None) == []
