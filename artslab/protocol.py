"""
Protocol definitions for the gallery and its collaborators.

Defines interface contracts at two levels:
- MediumProtocol: the key/value persistence medium under the record store
- RecordStoreProtocol / LookupClientProtocol: what the Gallery engine needs,
  so tests can substitute in-memory fakes
"""

from typing import Iterable, Optional, Protocol, Union, runtime_checkable

from .types import Partition, Record


@runtime_checkable
class MediumProtocol(Protocol):
    """
    A string key -> string value store.

    Implemented by:
    - MemoryMedium (tests, ephemeral use)
    - SqliteMedium (on-disk store)
    """

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@runtime_checkable
class RecordStoreProtocol(Protocol):
    """Partitioned record storage with replace-on-conflict writes."""

    def load(self, partition: Union[Partition, str]) -> list[Record]: ...

    def put(self, partition: Union[Partition, str], record: Record) -> Record: ...

    def delete(self, partition: Union[Partition, str], id: Union[str, int]) -> list[Record]: ...

    def find(self, partition: Union[Partition, str], id: Union[str, int]) -> Optional[Record]: ...

    def clear(self, partition: Union[Partition, str]) -> None: ...


@runtime_checkable
class LookupClientProtocol(Protocol):
    """
    Remote collection search.

    Both operations degrade to "no data" on failure rather than raising.
    """

    async def search(self, query_text: str) -> list[str]: ...

    async def fetch(self, identifier: Union[str, int]) -> Optional[Record]: ...

    async def fetch_many(self, identifiers: Iterable[Union[str, int]]) -> list[Record]: ...
