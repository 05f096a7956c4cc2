"""Schema dispatch: version lookup and the table of layout handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from reftracker.core import codec, schema_v1
from reftracker.core.errors import ObjectNotFound, UnsupportedVersion
from reftracker.core.storage.base import ObjectStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaHandler:
    """Payload decoder and tracker algorithm for one schema version.

    Attributes:
        version: Schema version stored in the object attribute
        decode: Decodes the payload into a refcount
        create: Exclusively creates a tracker holding the given keys
        add: Adds keys to an existing tracker, returns how many were new
        remove: Removes keys, returns True if the tracker was deleted
    """

    version: int
    decode: Callable[[bytes], int]
    create: Callable[[ObjectStore, str, Sequence[str]], None]
    add: Callable[[ObjectStore, str, Sequence[str]], int]
    remove: Callable[[ObjectStore, str, Sequence[str]], bool]


SCHEMAS: dict[int, SchemaHandler] = {
    schema_v1.VERSION: SchemaHandler(
        version=schema_v1.VERSION,
        decode=codec.decode_refcount,
        create=schema_v1.create,
        add=schema_v1.add,
        remove=schema_v1.remove,
    ),
}


def get_schema(version: int) -> SchemaHandler:
    """Look up the handler for a schema version.

    Raises:
        UnsupportedVersion: If no handler is registered for the version.
    """
    handler = SCHEMAS.get(version)
    if handler is None:
        raise UnsupportedVersion(version)
    return handler


def current_schema() -> SchemaHandler:
    """Handler used for newly created trackers."""
    return get_schema(codec.CURRENT_SCHEMA_VERSION)


def read_schema_version(store: ObjectStore, name: str) -> int | None:
    """Read the schema version of a tracker.

    Returns:
        The schema version, or None if the tracker does not exist.

    Raises:
        UnsupportedVersion: If the stored version has no handler.
        DecodeError: If the stored attribute is malformed.
    """
    try:
        raw = store.get_attribute(name, codec.SCHEMA_VERSION_ATTR)
    except ObjectNotFound:
        logger.debug("Tracker %s does not exist", name)
        return None

    version = codec.decode_schema_version(raw)
    if version not in SCHEMAS:
        raise UnsupportedVersion(version)
    logger.debug("Tracker %s uses schema v%d", name, version)
    return version
