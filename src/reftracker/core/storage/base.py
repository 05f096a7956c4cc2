"""Object store interface consumed by the tracker engine."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from reftracker.core.models import ReadResult, StoredObject


class ObjectStore(ABC):
    """Abstract interface for transactional object stores.

    An object has a payload, a store-maintained version, named attributes and
    an ordered key sub-map. Every method is a single atomic transaction.
    Versions strictly increase across the whole store, so an object that is
    deleted and recreated never repeats a version it had before.
    """

    @abstractmethod
    def create_if_absent(
        self,
        name: str,
        attrs: dict[str, bytes],
        payload: bytes,
        keys: Sequence[str],
    ) -> int:
        """Create an object exclusively.

        Returns the new object's version.

        Raises:
            AlreadyExists: If the object exists.
        """
        ...

    @abstractmethod
    def read(self, name: str, keys: Sequence[str]) -> ReadResult:
        """Read payload and version, and look up a batch of keys.

        Raises:
            ObjectNotFound: If the object does not exist.
        """
        ...

    @abstractmethod
    def write(
        self,
        name: str,
        expected_version: int,
        payload: bytes | None = None,
        insert_keys: Sequence[str] = (),
        remove_keys: Sequence[str] = (),
        delete: bool = False,
    ) -> int | None:
        """Apply an update only if the object is still at ``expected_version``.

        With ``delete`` the whole object, key sub-map included, is removed and
        ``None`` is returned. Otherwise returns the new version.

        Raises:
            Conflict: If the version differs or the object no longer exists.
        """
        ...

    @abstractmethod
    def get_attribute(self, name: str, attr: str) -> bytes:
        """Read one attribute.

        Raises:
            ObjectNotFound: If the object does not exist.
            AttributeNotFound: If the attribute is not set.
        """
        ...

    @abstractmethod
    def describe(self, name: str) -> StoredObject | None:
        """Snapshot the whole object, or None if it does not exist."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Clean up resources."""
        ...

    def __enter__(self) -> "ObjectStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None
