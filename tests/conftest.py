"""Shared pytest fixtures."""

import logging

import pytest

from shared.cache.KeyValueStoreMemory import KeyValueStoreMemory
from shared.cache.LibraryCache import LibraryCache
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from tests.fakes import FakeFileSearchClient, FakeLLMClient

_LIBRARY_ENV = (
    "LIBRARY_STORE_DISPLAY_NAME",
    "LIBRARY_MAX_FILE_SIZE_BYTES",
    "LIBRARY_MAX_CONTEXT_MESSAGES",
    "LIBRARY_POLL_INTERVAL",
    "LIBRARY_UPLOAD_TIMEOUT",
    "LIBRARY_CACHE_FILE",
    "LIBRARY_MAX_SESSIONS",
    "LIBRARY_MAX_SESSION_ENTRIES",
)


@pytest.fixture(name="helper_config")
def helper_config_fixture(monkeypatch: pytest.MonkeyPatch) -> HelperConfig:
    """HelperConfig over a clean library environment."""
    for key in _LIBRARY_ENV:
        monkeypatch.delenv(key, raising=False)
    return HelperConfig(logger=ColorLogger(logging.getLogger("great_library.tests")))


@pytest.fixture(name="kv_store")
def kv_store_fixture() -> KeyValueStoreMemory:
    return KeyValueStoreMemory()


@pytest.fixture(name="cache")
def cache_fixture(helper_config: HelperConfig, kv_store: KeyValueStoreMemory) -> LibraryCache:
    return LibraryCache(helper_config=helper_config, store=kv_store)


@pytest.fixture(name="filesearch_client")
def filesearch_client_fixture() -> FakeFileSearchClient:
    return FakeFileSearchClient()


@pytest.fixture(name="llm_client")
def llm_client_fixture() -> FakeLLMClient:
    return FakeLLMClient()
