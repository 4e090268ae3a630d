"""
Identity and labeling of asset records.

Every record maps to a display label that doubles as its deduplication key
during traversal: two distinct store records with the same label collapse
into one visualization node.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import StoreQueryError
from ..store.facade import GraphStore
from ..store.model import (
    AssetRecord,
    AutnumRecord,
    ContactRecord,
    DomainRecord,
    Location,
    NetworkEndpoint,
    SocketAddress,
    Source,
    TLSCertificate,
)

log = logging.getLogger(__name__)


@dataclass
class VizNode:
    """A projected node: index, asset type tag, label and tooltip title."""
    id: int
    type: str
    label: str
    title: str


# Endpoint-like assets only become nodes when bound to a service
_CHECKED_TYPES = (NetworkEndpoint, SocketAddress)


def node_label(record: Optional[AssetRecord]) -> Optional[str]:
    """Label for a record, or None when the record never becomes a node."""
    if record is None or record.asset is None:
        return None
    asset = record.asset

    key = asset.key
    if not key or isinstance(asset, Source):
        return None

    if isinstance(asset, AutnumRecord):
        return f"{asset.handle} - {key}"
    if isinstance(asset, ContactRecord):
        return f"Found->{key}"
    if isinstance(asset, Location):
        parts = [
            asset.building_number,
            asset.street_name,
            asset.city,
            asset.province,
            asset.postal_code,
        ]
        return " ".join(parts)
    if isinstance(asset, DomainRecord):
        return f"WHOIS: {key}"
    if isinstance(asset, TLSCertificate):
        return f"x509 Serial Number: {asset.serial_number}"
    return key


def new_node(
    store: GraphStore,
    idx: int,
    record: Optional[AssetRecord],
    since: Optional[datetime] = None,
) -> Optional[VizNode]:
    """
    Build the projected node for a record.

    Returns None for records that are skipped entirely: missing assets,
    empty keys, sources, and network endpoints or socket addresses without
    an outgoing ``service`` relation.
    """
    label = node_label(record)
    if label is None:
        return None

    atype = str(record.asset_type)
    if isinstance(record.asset, _CHECKED_TYPES):
        try:
            rels = store.outgoing_relations(record, since, "service")
        except StoreQueryError as e:
            log.debug("Service lookup failed for %s: %s", label, e)
            return None
        if not rels:
            return None

    return VizNode(id=idx, type=atype, label=label, title=f"{atype}: {label}")
