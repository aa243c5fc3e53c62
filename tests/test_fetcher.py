"""
Tests for the osu! API fetchers: token cache, score lists and timer.
"""

from pbwatch.fetcher import Fetcher, ScoreFetchError, TokenAuthError
from pbwatch.storage import MemoryKeyValueStore

from tests.fakes import TIMER_URL, FakeOsuApi, best_list, make_score, ts

import httpx
import pytest


class TestTokenCache:
    """Tests for BaseFetcher.get_token."""

    async def test_cached_token_returned_without_request(
        self, api: FakeOsuApi, store: MemoryKeyValueStore, fetcher: Fetcher
    ):
        await store.put("osu_v2_token", "cached")
        assert await fetcher.get_token() == "cached"
        assert api.requests == []

    async def test_miss_grants_and_caches(self, api: FakeOsuApi, store: MemoryKeyValueStore, fetcher: Fetcher):
        assert await fetcher.get_token() == "token-1"
        assert await store.get("osu_v2_token") == "token-1"

        [request] = api.requests
        body = dict(httpx.QueryParams(request.content.decode()))
        assert body == {
            "client_id": "client-id",
            "client_secret": "client-secret",
            "grant_type": "client_credentials",
            "scope": "public",
        }

        assert await fetcher.get_token() == "token-1"
        assert api.token_grants == 1

    async def test_token_cached_with_reported_ttl(self, api: FakeOsuApi):
        now = [0.0]
        store = MemoryKeyValueStore(clock=lambda: now[0])
        fetcher = Fetcher("id", "secret", store, client=api.client())
        api.expires_in = 100

        assert await fetcher.get_token() == "token-1"
        now[0] = 100.0
        assert await fetcher.get_token() == "token-2"

    async def test_force_renew_skips_cache(self, api: FakeOsuApi, store: MemoryKeyValueStore, fetcher: Fetcher):
        await store.put("osu_v2_token", "cached")
        assert await fetcher.get_token(force_renew=True) == "token-1"
        assert await store.get("osu_v2_token") == "token-1"

    async def test_failure_returns_none_and_caches_nothing(
        self, api: FakeOsuApi, store: MemoryKeyValueStore, fetcher: Fetcher
    ):
        api.token_status = 401
        assert await fetcher.get_token() is None
        assert await store.get("osu_v2_token") is None

    async def test_grant_raises_on_failure(self, api: FakeOsuApi, fetcher: Fetcher):
        api.token_status = 500
        with pytest.raises(TokenAuthError):
            await fetcher.grant_access_token()

    async def test_non_positive_expiry_is_not_cached(
        self, api: FakeOsuApi, store: MemoryKeyValueStore, fetcher: Fetcher
    ):
        api.expires_in = 0

        assert await fetcher.get_token() == "token-1"
        assert await store.get("osu_v2_token") is None
        assert await fetcher.get_token() == "token-2"
        assert api.token_grants == 2

    async def test_scope_sequence_is_joined(self, api: FakeOsuApi, store: MemoryKeyValueStore):
        fetcher = Fetcher("id", "secret", store, client=api.client(), scope=("public", "identify"))
        await fetcher.get_token()

        [request] = api.requests
        assert dict(httpx.QueryParams(request.content.decode()))["scope"] == "public identify"
        assert Fetcher("id", "secret", store).scope == ["public"]


class TestScoreFetcher:
    """Tests for ScoreFetcher.fetch_recent_and_best."""

    async def test_fetches_both_lists(self, api: FakeOsuApi, fetcher: Fetcher):
        api.recent = [make_score(2, 300.0, ts(2)), make_score(1, 200.0, ts(1))]
        api.best = best_list([500.0, 400.0])

        recent, best = await fetcher.fetch_recent_and_best("tok")

        assert [s.id for s in recent] == [2, 1]
        assert sorted(s.pp for s in best) == [400.0, 500.0]

    async def test_request_shape(self, api: FakeOsuApi, fetcher: Fetcher):
        await fetcher.fetch_recent_and_best("tok")

        [recent_req] = api.requests_to("/scores/recent")
        [best_req] = api.requests_to("/scores/best")
        assert recent_req.headers["Authorization"] == "Bearer tok"
        assert recent_req.headers["x-api-version"] == "20240529"
        assert recent_req.url.params["limit"] == "50"
        assert recent_req.url.params["legacy_only"] == "1"
        assert recent_req.url.params["mode"] == "osu"
        assert best_req.url.params["limit"] == "100"

    @pytest.mark.parametrize(("attr", "kind"), [("recent_status", "recent"), ("best_status", "best")])
    async def test_non_success_raises(self, api: FakeOsuApi, fetcher: Fetcher, attr: str, kind: str):
        setattr(api, attr, 500)
        with pytest.raises(ScoreFetchError) as exc_info:
            await fetcher.fetch_recent_and_best("tok")
        assert exc_info.value.kind == kind
        assert exc_info.value.status_code == 500

    async def test_invalid_payload_raises(self, api: FakeOsuApi, fetcher: Fetcher):
        api.recent = [{"id": "not-a-score"}]
        with pytest.raises(ScoreFetchError):
            await fetcher.fetch_recent_and_best("tok")

    async def test_non_json_body_raises(self, api: FakeOsuApi, fetcher: Fetcher):
        api.scores_body = "<html>maintenance</html>"
        with pytest.raises(ScoreFetchError) as exc_info:
            await fetcher.fetch_recent_and_best("tok")
        assert exc_info.value.status_code is None
        assert "invalid JSON body" in str(exc_info.value)

    async def test_unauthorized_renews_token_once(self, api: FakeOsuApi, store: MemoryKeyValueStore, fetcher: Fetcher):
        api.unauthorized_once = True
        api.recent = [make_score(1, 200.0, ts(1))]

        recent, _ = await fetcher.fetch_recent_and_best("stale")

        assert [s.id for s in recent] == [1]
        assert api.token_grants == 1
        assert await store.get("osu_v2_token") == "token-1"

    async def test_unauthorized_and_renewal_fails(self, api: FakeOsuApi, fetcher: Fetcher):
        api.unauthorized_once = True
        api.token_status = 400
        with pytest.raises(TokenAuthError):
            await fetcher.fetch_recent_and_best("stale")


class TestTimerFetcher:
    """Tests for TimerFetcher.fetch_timer_value."""

    @pytest.fixture
    def timer_fetcher(self, api: FakeOsuApi, store: MemoryKeyValueStore) -> Fetcher:
        return Fetcher("id", "secret", store, client=api.client(), timer_url=TIMER_URL)

    async def test_disabled(self, api: FakeOsuApi, fetcher: Fetcher):
        assert await fetcher.fetch_timer_value() is None
        assert api.requests == []

    async def test_parses_integer(self, api: FakeOsuApi, timer_fetcher: Fetcher):
        api.timer_body = " 3723\n"
        assert await timer_fetcher.fetch_timer_value() == 3723

    async def test_cache_busting(self, api: FakeOsuApi, timer_fetcher: Fetcher):
        api.timer_body = "1"
        await timer_fetcher.fetch_timer_value()
        await timer_fetcher.fetch_timer_value()

        first, second = api.requests
        assert first.headers["Cache-Control"] == "no-cache"
        assert first.url.params["nocache"]
        assert first.url.params["nocache"] != second.url.params["nocache"]

    async def test_non_success(self, api: FakeOsuApi, timer_fetcher: Fetcher):
        api.timer_body = "12"
        api.timer_status = 503
        assert await timer_fetcher.fetch_timer_value() is None

    async def test_not_an_integer(self, api: FakeOsuApi, timer_fetcher: Fetcher):
        api.timer_body = "soon"
        assert await timer_fetcher.fetch_timer_value() is None

    @pytest.mark.parametrize("body", ["-1", " -3600\n"])
    async def test_negative_value(self, api: FakeOsuApi, timer_fetcher: Fetcher, body: str):
        api.timer_body = body
        assert await timer_fetcher.fetch_timer_value() is None

    async def test_zero_is_valid(self, api: FakeOsuApi, timer_fetcher: Fetcher):
        api.timer_body = "0"
        assert await timer_fetcher.fetch_timer_value() == 0

    async def test_transport_error(self, store: MemoryKeyValueStore):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = Fetcher("id", "secret", store, client=client, timer_url=TIMER_URL)
        assert await fetcher.fetch_timer_value() is None
