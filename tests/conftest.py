"""Shared fixtures: a fake osu! API / webhook and an in-memory store."""

from pbwatch.fetcher import Fetcher
from pbwatch.service import Announcer, CursorStore, ScorePipeline
from pbwatch.storage import MemoryKeyValueStore

from tests.fakes import USER_ID, WEBHOOK_URL, FakeOsuApi

import pytest


@pytest.fixture
def api() -> FakeOsuApi:
    return FakeOsuApi()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def fetcher(api: FakeOsuApi, store: MemoryKeyValueStore) -> Fetcher:
    return Fetcher(
        "client-id",
        "client-secret",
        store,
        client=api.client(),
        user_id=USER_ID,
        timer_url=None,
    )


@pytest.fixture
def announcer(api: FakeOsuApi) -> Announcer:
    return Announcer(WEBHOOK_URL, client=api.client(), interval=0)


@pytest.fixture
def cursor_store(store: MemoryKeyValueStore) -> CursorStore:
    return CursorStore(store)


@pytest.fixture
def pipeline(fetcher: Fetcher, cursor_store: CursorStore, announcer: Announcer) -> ScorePipeline:
    return ScorePipeline(fetcher, cursor_store, announcer)
