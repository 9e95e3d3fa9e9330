"""
artslab - an art gallery record store with museum-backed search.

User-entered records and records cached from the Metropolitan Museum
collection API live in two partitions of a key/value store.  Search
combines both, preferring user data, then fresh remote data, then the
stale cache.
"""

from .api import Artslab
from .errors import ArtslabError, RecordValidationError
from .gallery import Gallery
from .medium import MemoryMedium, SqliteMedium
from .museum_client import MuseumClient
from .record_store import RecordStore
from .types import Partition, Record, normalize_id

__all__ = [
    "Artslab",
    "ArtslabError",
    "Gallery",
    "MemoryMedium",
    "MuseumClient",
    "Partition",
    "Record",
    "RecordStore",
    "RecordValidationError",
    "SqliteMedium",
    "normalize_id",
]
