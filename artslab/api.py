"""
Core API for the artslab gallery.

The Artslab object wires configuration, persistence medium, record store,
museum client and Gallery engine together and exposes the operations a
presentation layer needs.
"""

from pathlib import Path
from typing import Optional, Union

from .config import StoreConfig, get_store_path, load_or_create_config
from .gallery import Gallery
from .medium import DB_FILENAME, MemoryMedium, SqliteMedium
from .museum_client import MuseumClient
from .protocol import LookupClientProtocol, MediumProtocol
from .record_store import RecordStore
from .types import Partition, Record


def create_medium(config: StoreConfig) -> MediumProtocol:
    """Build the persistence medium named in the config."""
    if config.medium == "memory":
        return MemoryMedium()
    return SqliteMedium(config.path / DB_FILENAME)


class Artslab:
    """
    Art gallery store: user records, cached museum records, and search.

    Example:
        async with Artslab() as lab:
            await lab.populate_cache_if_empty()
            results = await lab.search("starry night")
    """

    def __init__(
        self,
        store_path: Optional[Union[str, Path]] = None,
        *,
        config: Optional[StoreConfig] = None,
        medium: Optional[MediumProtocol] = None,
        client: Optional[LookupClientProtocol] = None,
    ) -> None:
        """
        Open (or create) a gallery store.

        Args:
            store_path: Store directory. Uses ARTSLAB_STORE_PATH or ~/.artslab if not given.
            config: Pre-loaded StoreConfig (skips filesystem config discovery).
            medium: Injected persistence medium (skips the configured one).
            client: Injected lookup client (skips creating a MuseumClient).
        """
        if config is not None:
            self._config = config
        else:
            self._config = load_or_create_config(get_store_path(
                Path(store_path) if store_path is not None else None
            ))

        self._medium = medium if medium is not None else create_medium(self._config)
        self._store = RecordStore(self._medium, namespace=self._config.namespace)

        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            remote = self._config.remote
            self._client = MuseumClient(
                remote.api_url,
                timeout=remote.timeout,
                max_concurrency=remote.max_concurrency,
            )
            self._owns_client = True

        self._gallery = Gallery(self._store, self._client, seed_query=self._config.remote.seed_query)

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def gallery(self) -> Gallery:
        return self._gallery

    # -- Display and search --

    def visible_records(self) -> list[Record]:
        return self._gallery.visible_records()

    def local_search(self, query_text: str, partition: Union[Partition, str]) -> list[Record]:
        return self._gallery.local_search(query_text, partition)

    async def search(self, query_text: str) -> list[Record]:
        return await self._gallery.search(query_text)

    async def populate_cache_if_empty(self, seed_query: Optional[str] = None) -> int:
        return await self._gallery.populate_cache_if_empty(seed_query)

    # -- Record CRUD --

    def load(self, partition: Union[Partition, str]) -> list[Record]:
        return self._store.load(partition)

    def put(self, partition: Union[Partition, str], record: Record) -> Record:
        return self._store.put(partition, record)

    def delete(self, partition: Union[Partition, str], id: Union[str, int]) -> list[Record]:
        return self._store.delete(partition, id)

    def find(self, partition: Union[Partition, str], id: Union[str, int]) -> Optional[Record]:
        return self._store.find(partition, id)

    def clear(self, partition: Union[Partition, str]) -> None:
        self._store.clear(partition)

    # -- Lifecycle --

    async def aclose(self) -> None:
        """Close the HTTP client (if created here) and the medium."""
        if self._owns_client:
            await self._client.aclose()
        close = getattr(self._medium, "close", None)
        if close is not None:
            close()

    async def __aenter__(self) -> "Artslab":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
