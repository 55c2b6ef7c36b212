from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.bridge.dependencies import reset_cached_dependencies
from backend.bridge.main import create_app
from tests.provider_fakes import FAKE_PROVIDER_MODULE, FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    fake_provider: FakeProvider,
) -> Iterator[TestClient]:
    data_dir = tmp_path / "runtime-data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setitem(sys.modules, FAKE_PROVIDER_MODULE, fake_provider.module)
    monkeypatch.setenv("NEWSTUBE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("NEWSTUBE_PROVIDER_MODULE", FAKE_PROVIDER_MODULE)
    monkeypatch.setenv("NEWSTUBE_TELEMETRY_ENABLED", "0")
    reset_cached_dependencies()

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

    reset_cached_dependencies()
