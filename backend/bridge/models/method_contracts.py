from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MethodName = Literal[
    "getCaptions",
    "searchVideos",
    "searchChannels",
    "getChannelVideos",
]

MethodStatus = Literal["ok", "failed", "not_implemented"]

FAILURE_CODES: dict[MethodName, str] = {
    "getCaptions": "CAPTION_FAIL",
    "searchVideos": "SEARCH_FAIL",
    "searchChannels": "SEARCH_FAIL",
    "getChannelVideos": "CHANNEL_FAIL",
}


def _default_arguments() -> dict[str, Any]:
    return {}


class MethodRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    arguments: dict[str, Any] = Field(default_factory=_default_arguments)


class MethodError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    message: str


class MethodResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ok: bool
    method: str
    status: MethodStatus
    result: Any = None
    error: MethodError | None = None


class MethodCatalogEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: MethodName
    description: str
    arguments: list[str]
