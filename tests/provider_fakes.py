from __future__ import annotations

from types import ModuleType, SimpleNamespace
from typing import Any

FAKE_PROVIDER_MODULE = "fake_newpipe_extractor"


class JavaStyleItem:
    """Result item exposing getter methods the way a bridged JVM object does."""

    def __init__(
        self,
        url: str | None,
        name: str | None,
        *,
        uploader: str | None = None,
        upload_date: Any = None,
        textual_upload_date: str | None = None,
        thumbnails: list[Any] | None = None,
    ) -> None:
        self._url = url
        self._name = name
        self._uploader = uploader
        self._upload_date = upload_date
        self._textual_upload_date = textual_upload_date
        self._thumbnails = thumbnails

    def getUrl(self) -> str | None:  # noqa: N802
        return self._url

    def getName(self) -> str | None:  # noqa: N802
        return self._name

    def getUploaderName(self) -> str | None:  # noqa: N802
        return self._uploader

    def getUploadDate(self) -> Any:  # noqa: N802
        return self._upload_date

    def getTextualUploadDate(self) -> str | None:  # noqa: N802
        return self._textual_upload_date

    def getThumbnails(self) -> list[Any] | None:  # noqa: N802
        return self._thumbnails


class FakeSearchExtractor:
    def __init__(self, query: str) -> None:
        self.query = query
        self.fetched = False

    def fetchPage(self) -> None:  # noqa: N802
        self.fetched = True


class FetchOnlySearchExtractor:
    def __init__(self, query: str) -> None:
        self.query = query
        self.fetched = False

    def fetch(self) -> None:
        self.fetched = True


class PrepopulatedSearchExtractor:
    """Extractor that arrives already populated and has no fetch step."""

    def __init__(self, query: str) -> None:
        self.query = query


class FakeService:
    def __init__(self, provider: FakeProvider) -> None:
        self._provider = provider
        self.extractor_type: type[Any] = FakeSearchExtractor
        self.created_extractors: list[Any] = []

    def getSearchExtractor(self, query: str) -> Any:  # noqa: N802
        self._provider.calls.append(("search_extractor", query))
        extractor = self.extractor_type(query)
        self.created_extractors.append(extractor)
        return extractor


class FakeProvider:
    """
    In-memory provider library laid out like the real one:
    `ServiceList.YouTube`, `channel.ChannelInfo.getInfo`, `search.SearchInfo.getInfo`...
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.search_results: dict[str, list[Any]] = {}
        self.channels: dict[str, Any] = {}
        self.tab_infos: dict[str, Any] = {}
        self.streams: dict[str, Any] = {}
        self.initialized_with: Any = None
        self.service = FakeService(self)
        self.module = self._build_module()

    def _build_module(self) -> ModuleType:
        module = ModuleType(FAKE_PROVIDER_MODULE)
        provider = self

        def init(downloader: Any) -> None:
            provider.initialized_with = downloader

        def channel_info(service: Any, url: str) -> Any:
            provider.calls.append(("channel_info", url))
            if url not in provider.channels:
                raise LookupError(f"unknown channel {url}")
            return provider.channels[url]

        def tab_info(service: Any, url: str) -> Any:
            provider.calls.append(("tab_info", url))
            if url not in provider.tab_infos:
                raise LookupError(f"unknown tab {url}")
            return provider.tab_infos[url]

        def stream_info(service: Any, url: str) -> Any:
            provider.calls.append(("stream_info", url))
            if url not in provider.streams:
                raise LookupError(f"unknown stream {url}")
            return provider.streams[url]

        def search_info(extractor: Any) -> Any:
            provider.calls.append(("search_info", extractor.query))
            return {"items": provider.search_results.get(extractor.query, [])}

        module.NewPipe = SimpleNamespace(init=init)  # type: ignore[attr-defined]
        module.ServiceList = SimpleNamespace(YouTube=self.service)  # type: ignore[attr-defined]
        module.channel = SimpleNamespace(  # type: ignore[attr-defined]
            ChannelInfo=SimpleNamespace(getInfo=channel_info),
            tabs=SimpleNamespace(ChannelTabInfo=SimpleNamespace(getInfo=tab_info)),
        )
        module.stream = SimpleNamespace(  # type: ignore[attr-defined]
            StreamInfo=SimpleNamespace(getInfo=stream_info)
        )
        module.search = SimpleNamespace(  # type: ignore[attr-defined]
            SearchInfo=SimpleNamespace(getInfo=search_info)
        )
        return module

