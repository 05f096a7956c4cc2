"""Exception hierarchy for reference trackers and their object stores."""


class TrackerError(Exception):
    """Base class for all reference tracker errors."""


class StoreError(TrackerError):
    """A condition reported by the backing object store."""


class ObjectNotFound(StoreError):
    """The named object does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"object {name!r} does not exist")
        self.name = name


class AttributeNotFound(StoreError):
    """The object exists but does not carry the requested attribute."""

    def __init__(self, name: str, attr: str) -> None:
        super().__init__(f"object {name!r} has no attribute {attr!r}")
        self.name = name
        self.attr = attr


class RetryableError(StoreError):
    """Lost a race with another writer. Retry the whole operation."""


class AlreadyExists(RetryableError):
    """Exclusive create failed because the object already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"object {name!r} already exists")
        self.name = name


class Conflict(RetryableError):
    """The object changed since it was last read."""

    def __init__(self, name: str, expected_version: int, actual_version: int | None = None) -> None:
        if actual_version is None:
            detail = "object is gone"
        else:
            detail = f"found version {actual_version}"
        super().__init__(
            f"object {name!r} changed since version {expected_version} ({detail})"
        )
        self.name = name
        self.expected_version = expected_version
        self.actual_version = actual_version


class UnsupportedVersion(TrackerError):
    """The stored schema version has no known layout."""

    def __init__(self, version: int) -> None:
        super().__init__(f"unsupported tracker schema version {version}")
        self.version = version


class DecodeError(TrackerError):
    """Stored bytes do not match the expected layout."""


class InconsistentTracker(TrackerError):
    """The stored reference count disagrees with the tracked key set."""


class EmptyKeyBatch(TrackerError, ValueError):
    """Add and remove require at least one key."""

    def __init__(self) -> None:
        super().__init__("key batch must not be empty")
