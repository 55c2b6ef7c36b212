from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VideoResult:
    video_url: str
    title: str
    channel: str
    thumb: str = ""
    published_millis: int = 0
    published_text: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "videoUrl": self.video_url,
            "title": self.title,
            "channel": self.channel,
            "thumb": self.thumb,
            "publishedMillis": self.published_millis,
            "publishedText": self.published_text,
        }


@dataclass(frozen=True)
class ChannelResult:
    channel_url: str
    title: str
    thumb: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "channelUrl": self.channel_url,
            "title": self.title,
            "thumb": self.thumb,
        }


@dataclass(frozen=True)
class CaptionResult:
    has_captions: bool
    caption_url: str | None = None
    caption_lang: str | None = None

    @classmethod
    def missing(cls) -> CaptionResult:
        return cls(has_captions=False)

    def to_payload(self) -> dict[str, Any]:
        if not self.has_captions:
            return {"hasCaptions": False}
        return {
            "hasCaptions": True,
            "captionUrl": self.caption_url,
            "captionLang": self.caption_lang or "",
        }
