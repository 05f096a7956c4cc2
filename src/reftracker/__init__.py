"""
Reference Tracker

An idempotent, distributed reference counter. Instead of bare increments and
decrements it tracks the set of keys identifying each holder of a resource,
so repeated adds or removes of the same key never skew the count.

Features:
- Safe for many concurrent writers on different nodes (optimistic CAS on
  the store's object version)
- Tracker object deleted automatically when its last reference goes away
- Versioned on-object layout with schema dispatch
- Pluggable object stores: in-memory and Redis
"""

from reftracker.core.config import TrackerConfig
from reftracker.core.errors import AlreadyExists, Conflict, RetryableError, TrackerError
from reftracker.core.models import TrackerState
from reftracker.core.tracker import ReferenceTracker, add, inspect, remove
from reftracker.retry import call_with_retries

__version__ = "0.1.0"
__all__ = [
    "ReferenceTracker",
    "TrackerConfig",
    "TrackerState",
    "TrackerError",
    "RetryableError",
    "AlreadyExists",
    "Conflict",
    "add",
    "remove",
    "inspect",
    "call_with_retries",
]
