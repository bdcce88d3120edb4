"""Unit test configuration."""

from typing import Iterator

import pytest

from remscontent.conf.rems import RemsConfig
from remscontent.provider import RemsContentProvider
from remscontent.services.rems_service import RemsServiceHandler

from tests.unit.patches.rems_service import MockRems, patch_rems

MOCK_PROVIDER_CONFIG = {"endpoint": "rems.example.org", "api_user": "owner", "api_key": "secret"}


@pytest.fixture(autouse=True)
def rems_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("REMS_ENDPOINT", "REMS_API_USER", "REMS_API_KEY", "REMS_SCHEME", "REMS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def rems_config() -> RemsConfig:
    return RemsConfig(REMS_ENDPOINT="rems.example.org", REMS_API_USER="owner", REMS_API_KEY="secret")


@pytest.fixture
def rems_client(rems_config: RemsConfig) -> RemsServiceHandler:
    return RemsServiceHandler(rems_config)


@pytest.fixture
def mock_rems() -> Iterator[MockRems]:
    rems = MockRems()
    with patch_rems(rems):
        yield rems


@pytest.fixture
def provider(mock_rems: MockRems) -> RemsContentProvider:
    provider = RemsContentProvider("test")
    provider.configure(MOCK_PROVIDER_CONFIG)
    return provider
