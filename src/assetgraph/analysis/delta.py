"""
Newly discovered names relative to a cutoff.

Without an explicit cutoff, the most recent observation of any in-scope
name, truncated to the start of its UTC day, becomes the baseline.
"""

import logging
from datetime import datetime
from typing import Optional

from ..errors import StoreQueryError
from ..store.facade import GraphStore
from ..store.model import FQDN, AssetRecord, to_utc

log = logging.getLogger(__name__)


def truncate_to_day(ts: datetime) -> datetime:
    """Start of the UTC calendar day containing ts."""
    return to_utc(ts).replace(hour=0, minute=0, second=0, microsecond=0)


def derive_cutoff(records: list[AssetRecord]) -> Optional[datetime]:
    """Latest last-seen time among FQDN records, truncated to its day."""
    seen = [r.last_seen for r in records if isinstance(r.asset, FQDN)]
    if not seen:
        return None
    return truncate_to_day(max(seen))


def scope_cutoff(domains: list[str], store: GraphStore) -> Optional[datetime]:
    """Cutoff derived from the in-scope names, or None when there are none."""
    if not domains:
        return None
    try:
        records = store.find_by_scope([FQDN(name=d) for d in domains])
    except StoreQueryError as e:
        log.warning("Scope query failed: %s", e)
        return None
    return derive_cutoff(records)


def new_names(
    domains: list[str],
    store: GraphStore,
    since: Optional[datetime] = None,
) -> list[str]:
    """
    Names in scope first created and last seen on or after the cutoff.

    Returns a sorted, deduplicated list. A name seen before the cutoff and
    merely observed again afterwards is not new.
    """
    if not domains:
        return []

    since = to_utc(since)
    try:
        records = store.find_by_scope([FQDN(name=d) for d in domains], since)
    except StoreQueryError as e:
        log.warning("Scope query failed: %s", e)
        return []

    if since is None:
        since = derive_cutoff(records)
        if since is None:
            return []
        log.debug("Derived cutoff %s", since.isoformat())

    names = {
        r.asset.name
        for r in records
        if isinstance(r.asset, FQDN)
        and r.created_at >= since
        and r.last_seen >= since
    }
    return sorted(names)
