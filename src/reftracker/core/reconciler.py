"""Batched key presence lookup against a tracker's key set."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from reftracker.core.models import Reconciliation
from reftracker.core.storage.base import ObjectStore

logger = logging.getLogger(__name__)


def reconcile(
    store: ObjectStore,
    name: str,
    keys: Sequence[str],
    decode: Callable[[bytes], int],
) -> Reconciliation:
    """Look up which of ``keys`` the tracker already holds.

    A single read transaction fetches the payload, the store version and the
    present subset of the batch, so all three are mutually consistent.

    Args:
        store: Object store holding the tracker
        name: Tracker object name
        keys: Requested key batch, duplicates allowed
        decode: Payload decoder of the tracker's schema, returning refcount

    Returns:
        Reconciliation with a presence flag per requested key

    Raises:
        ObjectNotFound: If the tracker does not exist
        DecodeError: If the payload is malformed
    """
    keys = list(keys)
    result = store.read(name, keys)
    refcount = decode(result.payload)

    # Linear scan per key; batches are small.
    present = [key in result.present_keys for key in keys]

    logger.debug(
        "Tracker %s at version %d holds %d references; %d of %d requested keys found",
        name,
        result.version,
        refcount,
        len(result.present_keys),
        len(keys),
    )
    return Reconciliation(
        keys=keys,
        present=present,
        refcount=refcount,
        store_version=result.version,
    )
