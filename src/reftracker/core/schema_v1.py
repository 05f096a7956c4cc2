"""Tracker algorithm for schema version 1 objects."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from reftracker.core.codec import (
    SCHEMA_VERSION_ATTR,
    decode_refcount,
    encode_refcount,
    encode_schema_version,
)
from reftracker.core.errors import Conflict, InconsistentTracker
from reftracker.core.models import unique_keys
from reftracker.core.reconciler import reconcile
from reftracker.core.storage.base import ObjectStore

logger = logging.getLogger(__name__)

VERSION = 1


def create(store: ObjectStore, name: str, keys: Sequence[str]) -> None:
    """Create a new tracker holding ``keys``.

    Raises:
        AlreadyExists: If another caller created the tracker first.
    """
    keys = unique_keys(list(keys))
    logger.debug("Creating tracker %s (schema v%d) with %d keys", name, VERSION, len(keys))
    store.create_if_absent(
        name,
        attrs={SCHEMA_VERSION_ATTR: encode_schema_version(VERSION)},
        payload=encode_refcount(len(keys)),
        keys=keys,
    )
    logger.info("Created tracker %s with %d references", name, len(keys))


def add(store: ObjectStore, name: str, keys: Sequence[str]) -> int:
    """Add the untracked subset of ``keys`` to an existing tracker.

    Returns the number of keys actually added. Zero means nothing was written.

    Raises:
        Conflict: If the tracker changed after it was read.
    """
    state = reconcile(store, name, keys, decode_refcount)
    to_add = state.missing_keys()
    if not to_add:
        logger.debug("All requested keys are already tracked by %s", name)
        return 0

    refcount = state.refcount + len(to_add)
    logger.debug(
        "Adding %d of %d requested keys to %s: %s",
        len(to_add),
        len(state.keys),
        name,
        ", ".join(to_add),
    )
    try:
        store.write(
            name,
            expected_version=state.store_version,
            payload=encode_refcount(refcount),
            insert_keys=to_add,
        )
    except Conflict:
        logger.info("Tracker %s changed since it was read; add must be retried", name)
        raise

    logger.info("Tracker %s now holds %d references", name, refcount)
    return len(to_add)


def remove(store: ObjectStore, name: str, keys: Sequence[str]) -> bool:
    """Remove the tracked subset of ``keys`` from an existing tracker.

    Deletes the tracker object instead of storing a zero count. Returns True
    only in that case.

    Raises:
        Conflict: If the tracker changed after it was read.
        InconsistentTracker: If the stored count is below the keys found.
    """
    state = reconcile(store, name, keys, decode_refcount)
    to_remove = state.present_keys()
    if not to_remove:
        logger.debug("None of the requested keys are tracked by %s", name)
        return False

    refcount = state.refcount - len(to_remove)
    if refcount < 0:
        raise InconsistentTracker(
            f"tracker {name!r} stores refcount {state.refcount} "
            f"but {len(to_remove)} keys were found"
        )

    logger.debug(
        "Removing %d of %d requested keys from %s: %s",
        len(to_remove),
        len(state.keys),
        name,
        ", ".join(to_remove),
    )
    try:
        if refcount == 0:
            logger.debug("Tracker %s would hold no references; deleting it", name)
            store.write(name, expected_version=state.store_version, delete=True)
        else:
            store.write(
                name,
                expected_version=state.store_version,
                payload=encode_refcount(refcount),
                remove_keys=to_remove,
            )
    except Conflict:
        logger.info("Tracker %s changed since it was read; remove must be retried", name)
        raise

    if refcount == 0:
        logger.info("Tracker %s released its last reference and was deleted", name)
        return True
    logger.info("Tracker %s now holds %d references", name, refcount)
    return False
