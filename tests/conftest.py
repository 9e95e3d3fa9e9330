"""
Shared pytest fixtures for artslab tests.

Provides an in-memory medium and a fake museum client so no test touches
the network or the user's real store.
"""

from typing import Iterable, Optional, Union

import pytest

from artslab.gallery import Gallery
from artslab.medium import MemoryMedium
from artslab.record_store import RecordStore
from artslab.types import Record, normalize_id


class FakeLookupClient:
    """
    Deterministic stand-in for MuseumClient.

    ``results`` maps query text to object ids; ``objects`` maps ids to the
    Record a fetch returns.  Ids with no object fetch as None, like a 404.
    Setting ``fail`` makes every search return [], like a transport error.
    """

    def __init__(
        self,
        results: Optional[dict[str, list]] = None,
        objects: Optional[dict] = None,
    ):
        self.results = dict(results or {})
        self.objects = {normalize_id(k): v for k, v in (objects or {}).items()}
        self.fail = False
        self.search_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self.closed = False

    async def search(self, query_text: str) -> list[str]:
        self.search_calls.append(query_text)
        if self.fail or not query_text:
            return []
        return [normalize_id(i) for i in self.results.get(query_text, [])]

    async def fetch(self, identifier: Union[str, int]) -> Optional[Record]:
        object_id = normalize_id(identifier)
        self.fetch_calls.append(object_id)
        return self.objects.get(object_id)

    async def fetch_many(self, identifiers: Iterable[Union[str, int]]) -> list[Record]:
        records = [await self.fetch(i) for i in identifiers]
        return [r for r in records if r is not None]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def medium():
    """A fresh in-memory medium."""
    return MemoryMedium()


@pytest.fixture
def store(medium):
    """RecordStore over the in-memory medium."""
    return RecordStore(medium)


@pytest.fixture
def fake_client():
    """A FakeLookupClient with no results configured."""
    return FakeLookupClient()


@pytest.fixture
def gallery(store, fake_client):
    """Gallery wired to the in-memory store and fake client."""
    return Gallery(store, fake_client)


@pytest.fixture
def starry_night():
    return Record(id=1, title="Starry Night", artist="Van Gogh")


@pytest.fixture
def isolated_store_path(tmp_path, monkeypatch):
    """Point ARTSLAB_STORE_PATH at a temporary directory."""
    store_path = tmp_path / "store"
    monkeypatch.setenv("ARTSLAB_STORE_PATH", str(store_path))
    monkeypatch.delenv("ARTSLAB_API_URL", raising=False)
    return store_path
