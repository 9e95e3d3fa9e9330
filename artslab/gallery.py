"""
Gallery: merged view and search over the user and cache partitions.

Search is local-first: user records that match always come first, then
fresh results from the museum API (which are cached), or, when the API
gives nothing back, matching records from the stale cache.
"""

import logging
from typing import Optional, Union

from .protocol import LookupClientProtocol, RecordStoreProtocol
from .types import Partition, Record, query_terms

logger = logging.getLogger(__name__)

DEFAULT_SEED_QUERY = "oil"


def score_record(record: Record, terms: list[str]) -> int:
    """Number of terms found as substrings of the record's searchable text."""
    haystack = record.haystack
    return sum(1 for term in terms if term in haystack)


class Gallery:
    """
    Merge & search engine over a RecordStore and a remote lookup client.

    The store and client are injected; the Gallery holds no state of its own
    beyond the default warm-up query.
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        client: LookupClientProtocol,
        *,
        seed_query: str = DEFAULT_SEED_QUERY,
    ):
        self._store = store
        self._client = client
        self._seed_query = seed_query

    @property
    def store(self) -> RecordStoreProtocol:
        return self._store

    # -------------------------------------------------------------------------
    # Local views
    # -------------------------------------------------------------------------

    def visible_records(self) -> list[Record]:
        """User records followed by cached records (no cross-partition dedup)."""
        return self._store.load(Partition.USER) + self._store.load(Partition.CACHE)

    def local_search(self, query_text: str, partition: Union[Partition, str]) -> list[Record]:
        """
        Records in a partition matching at least one query term.

        Matching is case-insensitive substring search over title, artist and
        description.  The score only decides inclusion; results keep the
        partition's order.  An empty query matches nothing.
        """
        terms = query_terms(query_text)
        if not terms:
            return []
        return [r for r in self._store.load(partition) if score_record(r, terms) > 0]

    # -------------------------------------------------------------------------
    # Remote-backed operations
    # -------------------------------------------------------------------------

    async def search(self, query_text: str) -> list[Record]:
        """
        Search user records, then the museum API, falling back to the cache.

        Fresh remote results are written to the cache partition.  "No remote
        results" and "remote call failed" are treated the same: both fall
        back to searching the cache.
        """
        user_matches = self.local_search(query_text, Partition.USER)

        fresh = await self._fetch_remote(query_text)
        if fresh:
            self._cache_records(fresh)
            return user_matches + fresh

        logger.info("No remote results for %r, searching cache", query_text)
        return user_matches + self.local_search(query_text, Partition.CACHE)

    async def populate_cache_if_empty(self, seed_query: Optional[str] = None) -> int:
        """
        Warm the cache partition once from a seed query.

        Does nothing if the cache already has records.  A single attempt:
        if the remote call yields nothing the cache stays empty and no retry
        is scheduled.

        Returns:
            Number of records written to the cache
        """
        if self._store.load(Partition.CACHE):
            return 0

        query = seed_query if seed_query is not None else self._seed_query
        fresh = await self._fetch_remote(query)
        if not fresh:
            logger.warning("Cache warm-up with %r returned nothing; cache left empty", query)
            return 0

        written = self._cache_records(fresh)
        logger.info("Cache warmed with %d records from %r", written, query)
        return written

    async def _fetch_remote(self, query_text: str) -> list[Record]:
        ids = await self._client.search(query_text)
        if not ids:
            return []
        return await self._client.fetch_many(ids)

    def _cache_records(self, records: list[Record]) -> int:
        """Write records to the cache so its order matches the given order.

        put() prepends, so writes go in reverse.  Records already cached
        with identical content are left alone.
        """
        written = 0
        for record in reversed(records):
            if self._store.find(Partition.CACHE, record.id) == record:
                continue
            self._store.put(Partition.CACHE, record)
            written += 1
        return written
