"""Tests for the Gallery merge & search engine."""

import httpx
import pytest

from artslab.gallery import Gallery, score_record
from artslab.museum_client import MuseumClient
from artslab.types import Partition, Record

from tests.conftest import FakeLookupClient


SUNFLOWERS = Record(id=101, title="Sunflowers", artist="Van Gogh", description="Still life")
WATER_LILIES = Record(id=102, title="Water Lilies", artist="Claude Monet")
HAYSTACKS = Record(id=103, title="Haystacks", artist="Claude Monet", description="End of summer")


class TestVisibleRecords:
    def test_user_then_cache(self, gallery, store):
        store.put("cache", Record(id=2, title="Cached"))
        store.put("user", Record(id=1, title="Mine"))
        assert [r.title for r in gallery.visible_records()] == ["Mine", "Cached"]

    def test_no_cross_partition_dedup(self, gallery, store):
        store.put("user", Record(id=1, title="Mine"))
        store.put("cache", Record(id=1, title="Cached"))
        assert [r.id for r in gallery.visible_records()] == ["1", "1"]

    def test_empty(self, gallery):
        assert gallery.visible_records() == []


class TestLocalSearch:
    def test_scenario_starry(self, gallery, store, starry_night):
        store.put("cache", starry_night)
        assert gallery.local_search("starry", "cache") == [starry_night]
        assert gallery.local_search("monet", "cache") == []

    def test_empty_query_matches_nothing(self, gallery, store, starry_night):
        store.put("user", starry_night)
        assert gallery.local_search("", "user") == []
        assert gallery.local_search("   ", "user") == []

    def test_case_insensitive_across_fields(self, gallery, store):
        store.put("user", SUNFLOWERS)
        assert gallery.local_search("STILL", Partition.USER) == [SUNFLOWERS]
        assert gallery.local_search("gogh", Partition.USER) == [SUNFLOWERS]

    def test_medium_is_not_searched(self, gallery, store):
        store.put("user", Record(id=1, title="Untitled", medium="Oil on canvas"))
        assert gallery.local_search("oil", "user") == []

    def test_keeps_partition_order_not_score_order(self, gallery, store):
        # HAYSTACKS scores 2 for "claude summer", WATER_LILIES scores 1
        store.put("user", HAYSTACKS)
        store.put("user", WATER_LILIES)
        results = gallery.local_search("claude summer", "user")
        assert results == [WATER_LILIES, HAYSTACKS]

    def test_results_subset_and_contain_a_term(self, gallery, store):
        for r in (SUNFLOWERS, WATER_LILIES, HAYSTACKS):
            store.put("user", r)
        query = "monet lilies picasso"
        results = gallery.local_search(query, "user")
        stored = store.load("user")
        assert all(r in stored for r in results)
        for r in results:
            assert any(term in r.haystack for term in ("monet", "lilies", "picasso"))

    def test_quoted_phrase(self, gallery, store):
        store.put("user", WATER_LILIES)
        store.put("user", Record(id=9, title="Water", artist="Someone"))
        assert gallery.local_search('"water lilies"', "user") == [WATER_LILIES]

    def test_score_record(self):
        assert score_record(HAYSTACKS, ["claude", "summer", "picasso"]) == 2


class TestSearch:
    @pytest.mark.asyncio
    async def test_remote_results_are_cached_and_returned(self, store):
        client = FakeLookupClient(
            results={"monet": [102, 103]},
            objects={102: WATER_LILIES, 103: HAYSTACKS},
        )
        gallery = Gallery(store, client)
        store.put("user", Record(id="mine", title="My Monet copy"))

        results = await gallery.search("monet")

        assert [r.id for r in results] == ["mine", "102", "103"]
        assert [r.id for r in store.load("cache")] == ["102", "103"]

    @pytest.mark.asyncio
    async def test_failed_fetches_are_omitted(self, store):
        client = FakeLookupClient(
            results={"monet": [102, 999, 103]},
            objects={102: WATER_LILIES, 103: HAYSTACKS},
        )
        results = await Gallery(store, client).search("monet")
        assert [r.id for r in results] == ["102", "103"]

    @pytest.mark.asyncio
    async def test_falls_back_to_cache_when_remote_empty(self, store):
        client = FakeLookupClient()
        client.fail = True
        store.put("cache", WATER_LILIES)
        store.put("cache", SUNFLOWERS)
        store.put("user", Record(id="u1", title="Monet study"))

        results = await Gallery(store, client).search("monet")

        assert [r.id for r in results] == ["u1", "102"]
        assert client.fetch_calls == []

    @pytest.mark.asyncio
    async def test_falls_back_when_every_fetch_fails(self, store):
        client = FakeLookupClient(results={"monet": [555]})
        store.put("cache", HAYSTACKS)
        results = await Gallery(store, client).search("monet")
        assert results == [HAYSTACKS]

    @pytest.mark.asyncio
    async def test_identical_cached_record_not_rewritten(self, store, medium):
        client = FakeLookupClient(results={"monet": [102]}, objects={102: WATER_LILIES})
        store.put("cache", WATER_LILIES)
        writes = []
        original_write = medium.write
        medium.write = lambda k, v: (writes.append(k), original_write(k, v))

        await Gallery(store, client).search("monet")

        assert writes == []

    @pytest.mark.asyncio
    async def test_updated_remote_record_replaces_cache(self, store):
        stale = Record(id=102, title="Water Lilies (old)", artist="Claude Monet")
        store.put("cache", stale)
        client = FakeLookupClient(results={"monet": [102]}, objects={102: WATER_LILIES})

        await Gallery(store, client).search("monet")

        assert store.load("cache") == [WATER_LILIES]

    @pytest.mark.asyncio
    async def test_single_remote_attempt(self, store):
        client = FakeLookupClient()
        await Gallery(store, client).search("nothing here")
        assert client.search_calls == ["nothing here"]


class TestSearchWithMuseumClient:
    """Gallery over a real MuseumClient whose transport misbehaves."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("respond", [
        lambda request: httpx.Response(503, text="down"),
        lambda request: httpx.Response(200, json={"total": 1, "objectIDs": 5}),
        lambda request: httpx.Response(200, text="<html>"),
    ])
    async def test_bad_remote_falls_back_to_cache(self, store, respond):
        store.put("cache", WATER_LILIES)
        store.put("user", Record(id="u1", title="Monet study"))

        async with MuseumClient(transport=httpx.MockTransport(respond)) as client:
            results = await Gallery(store, client).search("monet")

        assert [r.id for r in results] == ["u1", "102"]

    @pytest.mark.asyncio
    async def test_connection_error_falls_back_to_cache(self, store):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store.put("cache", HAYSTACKS)
        async with MuseumClient(transport=httpx.MockTransport(handler)) as client:
            assert await Gallery(store, client).search("monet") == [HAYSTACKS]

    @pytest.mark.asyncio
    async def test_unencodable_query_falls_back_to_cache(self, store):
        store.put("cache", Record(id=5, title="Caf\udce9 scene"))
        async with MuseumClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
            results = await Gallery(store, client).search("caf\udce9")
        assert [r.id for r in results] == ["5"]

    @pytest.mark.asyncio
    async def test_fresh_results_cached(self, store):
        def handler(request):
            if request.url.path.endswith("/search"):
                return httpx.Response(200, json={"total": 1, "objectIDs": [102]})
            return httpx.Response(200, json={
                "objectID": 102, "title": "Water Lilies", "artistDisplayName": "Claude Monet",
            })

        async with MuseumClient(transport=httpx.MockTransport(handler)) as client:
            results = await Gallery(store, client).search("monet")

        assert results == [WATER_LILIES]
        assert store.load("cache") == [WATER_LILIES]


class TestPopulateCache:
    @pytest.mark.asyncio
    async def test_fills_empty_cache(self, store):
        client = FakeLookupClient(
            results={"oil": [101, 103]},
            objects={101: SUNFLOWERS, 103: HAYSTACKS},
        )
        count = await Gallery(store, client).populate_cache_if_empty()
        assert count == 2
        assert [r.id for r in store.load("cache")] == ["101", "103"]
        assert client.search_calls == ["oil"]

    @pytest.mark.asyncio
    async def test_explicit_seed(self, store):
        client = FakeLookupClient(results={"monet": [102]}, objects={102: WATER_LILIES})
        gallery = Gallery(store, client, seed_query="ignored")
        assert await gallery.populate_cache_if_empty("monet") == 1
        assert client.search_calls == ["monet"]

    @pytest.mark.asyncio
    async def test_does_not_retrigger_when_cache_has_records(self, store):
        client = FakeLookupClient(results={"oil": [101]}, objects={101: SUNFLOWERS})
        store.put("cache", HAYSTACKS)
        assert await Gallery(store, client).populate_cache_if_empty() == 0
        assert client.search_calls == []

    @pytest.mark.asyncio
    async def test_empty_remote_leaves_cache_empty_without_retry(self, store):
        client = FakeLookupClient()
        client.fail = True
        gallery = Gallery(store, client)

        assert await gallery.populate_cache_if_empty() == 0
        assert store.load("cache") == []
        assert client.search_calls == ["oil"]

    @pytest.mark.asyncio
    async def test_second_call_is_noop_after_success(self, store):
        client = FakeLookupClient(results={"oil": [101]}, objects={101: SUNFLOWERS})
        gallery = Gallery(store, client)
        await gallery.populate_cache_if_empty()
        await gallery.populate_cache_if_empty()
        assert client.search_calls == ["oil"]

    @pytest.mark.asyncio
    async def test_user_records_do_not_block_warm_up(self, store):
        client = FakeLookupClient(results={"oil": [101]}, objects={101: SUNFLOWERS})
        store.put("user", WATER_LILIES)
        assert await Gallery(store, client).populate_cache_if_empty() == 1
