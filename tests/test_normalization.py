from __future__ import annotations

from types import SimpleNamespace

import pytest

from backend.bridge.models.results import VideoResult
from backend.bridge.services.normalization import (
    canonicalize_video_url,
    is_channel_like,
    is_video_like,
    items_to_channels,
    items_to_videos,
    normalize_channel_url,
    rank_by_recency,
)
from tests.provider_fakes import JavaStyleItem


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://www.youtube.com/watch?v=abc", "https://www.youtube.com/watch?v=abc"),
        ("/watch?v=abc", "https://www.youtube.com/watch?v=abc"),
        ("watch?v=abc", "https://www.youtube.com/watch?v=abc"),
        ("http://youtu.be/abc", "http://youtu.be/abc"),
    ],
)
def test_canonicalize_video_url(raw: str, expected: str) -> None:
    assert canonicalize_video_url(raw) == expected
    assert canonicalize_video_url(expected) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("UC1234567890", "https://www.youtube.com/channel/UC1234567890"),
        ("@someuser", "https://www.youtube.com/@someuser"),
        ("@folha", "https://www.youtube.com/@folha"),
        ("/@folha", "https://www.youtube.com/@folha"),
        ("UCshort", "https://www.youtube.com/UCshort"),
        ("c/someslug", "https://www.youtube.com/c/someslug"),
        ("https://m.youtube.com/@folha", "https://m.youtube.com/@folha"),
    ],
)
def test_normalize_channel_url(raw: str, expected: str) -> None:
    assert normalize_channel_url(raw) == expected
    assert normalize_channel_url(expected) == expected


def test_normalization_honours_custom_origin() -> None:
    assert canonicalize_video_url("/watch?v=1", origin="https://yt.test") == "https://yt.test/watch?v=1"
    assert normalize_channel_url("@news", origin="https://yt.test") == "https://yt.test/@news"
    assert normalize_channel_url("   ") == ""


def test_classification_markers() -> None:
    assert is_video_like("https://www.youtube.com/WATCH?v=1")
    assert is_video_like("https://youtu.be/1")
    assert not is_video_like("https://www.youtube.com/@folha")
    assert is_channel_like("https://www.youtube.com/channel/UC123")
    assert is_channel_like("https://www.youtube.com/@folha")
    assert is_channel_like("https://www.youtube.com/user/folha")
    assert is_channel_like("https://www.youtube.com/c/folha")
    assert not is_channel_like("https://www.youtube.com/watch?v=1")


def test_rank_by_recency_puts_unknown_timestamps_last_in_original_order() -> None:
    unknown_first = VideoResult(video_url="u1", title="a", channel="c")
    old = VideoResult(video_url="u2", title="b", channel="c", published_millis=100)
    unknown_second = VideoResult(video_url="u3", title="c", channel="c", published_millis=0)
    new = VideoResult(video_url="u4", title="d", channel="c", published_millis=900)

    ranked = rank_by_recency([unknown_first, old, unknown_second, new])

    assert [video.video_url for video in ranked] == ["u4", "u2", "u1", "u3"]


def test_items_to_videos_drops_incomplete_and_non_video_items() -> None:
    items = [
        JavaStyleItem("/watch?v=1", "First", uploader="Folha", upload_date=1000),
        JavaStyleItem("https://www.youtube.com/@folha", "A channel", uploader="Folha"),
        JavaStyleItem(None, "No url", uploader="Folha"),
        JavaStyleItem("/watch?v=2", "  ", uploader="Folha"),
        JavaStyleItem("/watch?v=3", "No uploader"),
        JavaStyleItem(
            "https://youtu.be/4",
            "Fourth",
            uploader="Folha",
            textual_upload_date="3 hours ago",
            thumbnails=[SimpleNamespace(url="https://i.test/4.jpg")],
        ),
    ]

    videos = items_to_videos(items)

    assert [video.to_payload() for video in videos] == [
        {
            "videoUrl": "https://www.youtube.com/watch?v=1",
            "title": "First",
            "channel": "Folha",
            "thumb": "",
            "publishedMillis": 1000,
            "publishedText": "",
        },
        {
            "videoUrl": "https://youtu.be/4",
            "title": "Fourth",
            "channel": "Folha",
            "thumb": "https://i.test/4.jpg",
            "publishedMillis": 0,
            "publishedText": "3 hours ago",
        },
    ]


def test_items_to_videos_uses_channel_fallback_for_missing_uploader() -> None:
    items = [JavaStyleItem("/watch?v=1", "Episode")]

    videos = items_to_videos(items, channel_fallback="Channel X")

    assert len(videos) == 1
    assert videos[0].channel == "Channel X"


def test_items_to_videos_respects_limit() -> None:
    items = [JavaStyleItem(f"/watch?v={index}", f"Video {index}", uploader="c") for index in range(5)]

    assert len(items_to_videos(items, limit=3)) == 3
    assert items_to_videos(items, limit=0) == []
    assert items_to_videos(items, limit=-2) == []
    assert len(items_to_videos(items)) == 5


def test_items_to_channels_keeps_channel_like_entries_only() -> None:
    items = [
        {"url": "/channel/UCabcdefghij", "name": "Channel One", "thumbnails": ["https://i.test/1"]},
        {"url": "UCabcdefghijk", "name": "Bare id"},
        {"url": "/watch?v=1", "name": "A video"},
        {"url": "@nameless"},
    ]

    channels = items_to_channels(items)

    assert [channel.to_payload() for channel in channels] == [
        {
            "channelUrl": "https://www.youtube.com/channel/UCabcdefghij",
            "title": "Channel One",
            "thumb": "https://i.test/1",
        },
        {
            "channelUrl": "https://www.youtube.com/channel/UCabcdefghijk",
            "title": "Bare id",
            "thumb": "",
        },
    ]
