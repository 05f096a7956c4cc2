"""Command line tool for adding and removing tracker references.

Trackers live in Redis, configured by REDIS_URL or REDIS_HOST (a .env file
is read too) or by --redis-url.

Usage:
    # Add two references to the default tracker (Redis from REDIS_URL or .env)
    reftracker -o add -k node-1,node-2

    # Release one of them from a named tracker in pool "csi"
    reftracker -p csi -n snapshot-42 -o rem -k node-1

    # Show the tracker state as JSON
    reftracker -n snapshot-42 -o show --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError
from redis.exceptions import RedisError

from reftracker.core.config import RedisConfig, StorageBackendConfig, TrackerConfig
from reftracker.core.errors import TrackerError
from reftracker.core.tracker import ReferenceTracker
from reftracker.retry import call_with_retries

logger = logging.getLogger("reftracker")

OPERATIONS = ("add", "rem", "show")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def parse_keys(keys_str: str) -> list[str]:
    """Split a comma separated key list.

    Raises:
        ValueError: If the list is empty or contains an empty key.
    """
    keys = [part.strip() for part in keys_str.split(",")]
    if any(not key for key in keys):
        raise ValueError(f"empty key in key list {keys_str!r}")
    return keys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reftracker",
        description="Idempotently add or remove references held by a tracker object",
    )
    parser.add_argument("-o", "--op", choices=OPERATIONS, required=True, help="operation")
    parser.add_argument("-k", "--keys", help="comma separated list of reference keys")
    parser.add_argument("-n", "--name", help="tracker object name (default from config)")
    parser.add_argument(
        "-p", "--pool", help="namespace for tracker objects within the store"
    )
    parser.add_argument("--redis-url", help="Redis URL (overrides REDIS_URL)")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=5,
        help="attempts per operation when racing other writers",
    )
    parser.add_argument("--json", action="store_true", help="print results as JSON")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="more logging (repeatable)"
    )
    return parser


def build_config(args: argparse.Namespace) -> TrackerConfig:
    redis_config = None
    if args.redis_url:
        redis_config = RedisConfig(url=args.redis_url)
    storage = StorageBackendConfig(backend_type="redis", redis=redis_config)

    config_kwargs = {"max_attempts": args.max_attempts, "storage": storage}
    if args.name:
        config_kwargs["default_tracker_name"] = args.name
    return TrackerConfig(**config_kwargs)


def run(args: argparse.Namespace, tracker: ReferenceTracker) -> int:
    """Execute one parsed command against a tracker and print the outcome."""
    name = tracker.config.default_tracker_name
    attempts = tracker.config.max_attempts

    if args.op == "show":
        state = tracker.inspect()
        if args.json:
            print(json.dumps(state.to_dict() if state else None))
        elif state is None:
            print(f"{name}: absent")
        else:
            print(
                f"{name}: refcount={state.refcount} "
                f"keys={','.join(state.keys)} version={state.store_version}"
            )
        return EXIT_OK

    keys = parse_keys(args.keys or "")
    if args.op == "add":
        flag = "created"
        value = call_with_retries(lambda: tracker.add(keys), attempts)
    else:
        flag = "deleted"
        value = call_with_retries(lambda: tracker.remove(keys), attempts)

    if args.json:
        print(json.dumps({"name": name, flag: value}))
    else:
        print(f"{name}: {flag}={str(value).lower()}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.op in ("add", "rem"):
        if not args.keys:
            parser.error("-k KEYS is required for add and rem")
        try:
            parse_keys(args.keys)
        except ValueError as exc:
            parser.error(str(exc))

    try:
        config = build_config(args)
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE

    try:
        with ReferenceTracker(config=config, namespace=args.pool) as tracker:
            return run(args, tracker)
    except (TrackerError, RedisError) as exc:
        logger.error("%s failed: %s", args.op, exc)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
