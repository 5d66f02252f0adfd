"""Append-only record stores.

Each engine owns one module-level RecordRegistry, created at import time and
kept for the life of the process. Records are never replaced or removed; the
original callable kept on each record is what a future restore would need.

Registries are not synchronized. Concurrent patching from several threads
must be serialized by the caller.
"""

from typing import Dict, Generic, Iterator, Optional, TypeVar

from hotsplice.core.config import get_int
from hotsplice.core.ids import DEFAULT_SUFFIX_LENGTH, new_id

R = TypeVar("R")


class RecordRegistry(Generic[R]):
    """Insertion-ordered store of records keyed by id.

    Example:
        >>> registry = RecordRegistry("inj")
        >>> record_id = registry.reserve_id()
        >>> registry.add(record_id, record)
    """

    def __init__(self, id_prefix: str, suffix_length: Optional[int] = None):
        """Initialize an empty registry.

        Args:
            id_prefix: Prefix used when minting ids for this registry
            suffix_length: Id suffix length; read once from config
                ``ids.suffix_length`` on first use when None
        """
        self.id_prefix = id_prefix
        self.suffix_length = suffix_length
        self._records: Dict[str, R] = {}

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[R]:
        return iter(list(self._records.values()))

    def reserve_id(self) -> str:
        """Mint an id not currently present in this registry."""
        if self.suffix_length is None:
            self.suffix_length = get_int(["ids", "suffix_length"], DEFAULT_SUFFIX_LENGTH)
        while True:
            candidate = new_id(self.id_prefix, self.suffix_length)
            if candidate not in self._records:
                return candidate

    def add(self, record_id: str, record: R) -> None:
        """Store a record.

        Raises:
            KeyError: If ``record_id`` is already present
        """
        if record_id in self._records:
            raise KeyError(f"record id {record_id!r} already registered")
        self._records[record_id] = record

    def get(self, record_id: str) -> Optional[R]:
        return self._records.get(record_id)
