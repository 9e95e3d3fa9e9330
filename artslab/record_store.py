"""
Record store over a key/value medium.

Each partition ("user", "cache") is one JSON array stored under
``<namespace>::<partition>``.  Every mutation is a full read-modify-write
of that partition's blob.  There is no locking; a single caller is assumed.
"""

import json
import logging
from typing import Optional, Union

from .protocol import MediumProtocol
from .types import Partition, Record, as_partition, normalize_id

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "artslab::gallery"


class RecordStore:
    """
    Partitioned record storage with dedup-by-id.

    The medium is injected so tests can use an in-memory fake.
    """

    def __init__(self, medium: MediumProtocol, namespace: str = DEFAULT_NAMESPACE):
        """
        Args:
            medium: Persistence medium (read/write/delete by key)
            namespace: Key prefix shared by both partitions
        """
        self._medium = medium
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def key_for(self, partition: Union[Partition, str]) -> str:
        """Storage key for a partition."""
        return f"{self._namespace}::{as_partition(partition).value}"

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def load(self, partition: Union[Partition, str]) -> list[Record]:
        """
        Load a partition's records in stored order.

        Missing or unparseable content yields an empty list; the problem is
        logged, never raised.  Entries that are not valid records are skipped.
        """
        key = self.key_for(partition)
        raw = self._medium.read(key)
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON data in storage key %r: %s", key, e)
            return []
        if not isinstance(data, list):
            logger.error(
                "Invalid data in storage key %r: expected a list, got %s",
                key, type(data).__name__,
            )
            return []

        records = []
        for i, entry in enumerate(data):
            try:
                records.append(Record.from_dict(entry))
            except (ValueError, TypeError) as e:
                logger.warning("Skipping invalid record %d in %r: %s", i, key, e)
        return records

    def find(self, partition: Union[Partition, str], id: Union[str, int]) -> Optional[Record]:
        """First record in the partition with a matching id, or None.

        Ids that cannot be normalized (blank, None) match nothing.
        """
        try:
            target = normalize_id(id)
        except ValueError:
            return None
        for record in self.load(partition):
            if record.id == target:
                return record
        return None

    def exists(self, partition: Union[Partition, str], id: Union[str, int]) -> bool:
        return self.find(partition, id) is not None

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def put(self, partition: Union[Partition, str], record: Record) -> Record:
        """
        Store a record at the front of the partition.

        An existing record with the same id is removed first, so the
        partition never holds two entries for one id.

        Returns:
            The stored record
        """
        records = self.load(partition)
        remaining = [r for r in records if r.id != record.id]
        if len(remaining) != len(records):
            logger.info("Replacing record %s in %s", record.id, self.key_for(partition))
        self._save(partition, [record] + remaining)
        return record

    def delete(self, partition: Union[Partition, str], id: Union[str, int]) -> list[Record]:
        """
        Remove the record with a matching id.

        Returns:
            The partition's remaining records
        """
        try:
            target = normalize_id(id)
        except ValueError:
            logger.warning("Ignoring delete of invalid id %r", id)
            return self.load(partition)
        remaining = [r for r in self.load(partition) if r.id != target]
        self._save(partition, remaining)
        logger.info("Deleted record %s from %s", target, self.key_for(partition))
        return remaining

    def clear(self, partition: Union[Partition, str]) -> None:
        """Remove the partition's stored content entirely."""
        key = self.key_for(partition)
        self._medium.delete(key)
        logger.info("Cleared %s", key)

    def _save(self, partition: Union[Partition, str], records: list[Record]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        self._medium.write(self.key_for(partition), payload)
