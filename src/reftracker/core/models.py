"""Data models for stored objects and tracker state."""

from dataclasses import dataclass, field
from typing import Any


def unique_keys(keys: list[str]) -> list[str]:
    """Drop duplicate keys, keeping first-seen order."""
    return list(dict.fromkeys(keys))


@dataclass
class ReadResult:
    """Result of one atomic read transaction against an object.

    Attributes:
        payload: Raw object payload
        version: Store version of the object at read time
        present_keys: Subset of the requested keys found in the key sub-map
    """

    payload: bytes
    version: int
    present_keys: list[str] = field(default_factory=list)


@dataclass
class StoredObject:
    """Full snapshot of an object as held by the store."""

    name: str
    version: int
    payload: bytes
    attrs: dict[str, bytes] = field(default_factory=dict)
    keys: list[str] = field(default_factory=list)


@dataclass
class Reconciliation:
    """Presence of a requested key batch in a tracker's key set.

    ``present`` is aligned with ``keys``. ``refcount`` and ``store_version``
    were read in the same transaction as the presence lookup.
    """

    keys: list[str]
    present: list[bool]
    refcount: int
    store_version: int

    def present_keys(self) -> list[str]:
        """Requested keys already tracked, deduplicated."""
        return unique_keys([k for k, found in zip(self.keys, self.present) if found])

    def missing_keys(self) -> list[str]:
        """Requested keys not tracked yet, deduplicated."""
        return unique_keys(
            [k for k, found in zip(self.keys, self.present) if not found]
        )


@dataclass
class TrackerState:
    """Decoded view of a tracker object.

    Attributes:
        name: Tracker object name
        schema_version: Layout revision of the object
        refcount: Stored reference count
        keys: Tracked reference keys, in store order
        store_version: Store version of the snapshot
    """

    name: str
    schema_version: int
    refcount: int
    keys: list[str]
    store_version: int

    @property
    def is_consistent(self) -> bool:
        """Whether the stored count matches the tracked key set."""
        return self.refcount == len(self.keys)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "schema_version": self.schema_version,
            "refcount": self.refcount,
            "keys": list(self.keys),
            "store_version": self.store_version,
        }
