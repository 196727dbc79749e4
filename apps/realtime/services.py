"""
Realtime change feeds.

Every write to a registered table bumps a version counter in the cache:
one for the whole table and one per `<column>=eq.<value>` filter the row
matches. Clients either poll the version and re-run their list query when it
moves, or (in-process) subscribe a callback that fires after commit.
"""
import logging
import threading
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from .registry import Feed, get_feed

logger = logging.getLogger(__name__)

KEY_PREFIX = "realtime:v"

Filter = Optional[Tuple[str, str]]


# ---------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------
def parse_filter(feed: Feed, raw: Optional[str]) -> Filter:
    """
    Parse `post_id=eq.<value>` into ("post_id", "<value>").

    Only equality on the feed's declared filter columns is supported, and
    every filter column is a UUID foreign key.
    """
    if not raw:
        return None
    column, sep, rest = raw.partition("=")
    op, dot, value = rest.partition(".")
    if not sep or not dot or op != "eq" or not value:
        raise ValueError(f"Unsupported filter: {raw!r}")
    if column not in feed.filter_fields:
        raise ValueError(f"Cannot filter {feed.table} on {column!r}")
    try:
        value = str(uuid.UUID(value))
    except ValueError:
        raise ValueError(f"Filter value for {column!r} must be a UUID")
    return column, value


def version_key(table: str, flt: Filter = None) -> str:
    if flt is None:
        return f"{KEY_PREFIX}:{table}"
    column, value = flt
    return f"{KEY_PREFIX}:{table}:{column}:{value}"


def get_version(table: str, flt: Filter = None) -> int:
    return cache.get(version_key(table, flt), 0)


def _incr(key: str) -> int:
    ttl = getattr(settings, "REALTIME_VERSION_TTL", None)
    cache.add(key, 0, ttl)
    try:
        return cache.incr(key)
    except ValueError:
        # evicted between add and incr
        cache.set(key, 1, ttl)
        return 1


# ---------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------
class Subscription:
    def __init__(self, table: str, flt: Filter, callback: Callable[[str, str], None]):
        self.id = uuid.uuid4().hex
        self.table = table
        self.filter = flt
        self.callback = callback
        self.active = True

    def matches(self, table: str, filters: Dict[str, str]) -> bool:
        if table != self.table:
            return False
        if self.filter is None:
            return True
        column, value = self.filter
        return filters.get(column) == value

    def unsubscribe(self):
        unsubscribe(self)


_subscriptions: List[Subscription] = []
_lock = threading.Lock()


def subscribe(table: str, filter: Optional[str], callback: Callable[[str, str], None]) -> Subscription:
    """
    Register `callback(event, table)` for changes to `table`, optionally
    restricted by a `<column>=eq.<value>` filter.
    """
    feed = get_feed(table)
    sub = Subscription(table, parse_filter(feed, filter), callback)
    with _lock:
        _subscriptions.append(sub)
    return sub


def unsubscribe(sub: Subscription):
    with _lock:
        sub.active = False
        if sub in _subscriptions:
            _subscriptions.remove(sub)


def _dispatch(table: str, event: str, filters: Dict[str, str]):
    with _lock:
        targets = [s for s in _subscriptions if s.active and s.matches(table, filters)]
    for sub in targets:
        try:
            sub.callback(event, table)
        except Exception:
            logger.exception("Realtime subscriber %s failed for %s", sub.id, table)


# ---------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------
def touch(table: str, event: str = "UPDATE", **filters):
    """
    Bump the table version plus one version per given filter column.
    Used directly for bulk updates that bypass model signals.
    """
    feed = get_feed(table)
    values = {col: str(val) for col, val in filters.items() if col in feed.filter_fields and val is not None}

    def _publish():
        _incr(version_key(table))
        for col, val in values.items():
            _incr(version_key(table, (col, val)))
        _dispatch(table, event, values)

    transaction.on_commit(_publish)


def publish_instance(feed: Feed, instance, event: str):
    filters = {col: getattr(instance, col, None) for col in feed.filter_fields}
    touch(feed.table, event, **filters)
