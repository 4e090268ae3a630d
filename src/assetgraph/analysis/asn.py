"""
ASN summary aggregation.

Walks from IP address records to their containing netblocks, from netblocks
to the autonomous systems announcing them, and from each autonomous system
to the RIR organization managing it, folding the results into a per-ASN
table of RIR name and netblock occurrence counts.
"""

import ipaddress
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ..errors import StoreQueryError, TypeMismatchError
from ..store.facade import GraphStore
from ..store.model import (
    AssetRecord,
    AutonomousSystem,
    IPAddress,
    Netblock,
    RIROrganization,
    to_utc,
)

log = logging.getLogger(__name__)


@dataclass
class ASNInfo:
    """Summary of one autonomous system."""
    rir_name: str = ""
    cidrs: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.cidrs.values())


def normalize_cidr(cidr: str) -> str:
    """Canonical string form of a CIDR; unparseable values pass through."""
    try:
        return str(ipaddress.ip_network(cidr.strip(), strict=False))
    except ValueError:
        return cidr


class ASNSummarizer:
    """
    Incrementally builds the ASN summary table.

    Each ``add_ip`` call counts the IP once for every (netblock, ASN) pair it
    resolves to, so an address inside overlapping netblocks contributes one
    increment per netblock. Store failures and unexpected asset kinds are
    logged and skip only the affected relation.
    """

    def __init__(self, store: GraphStore, since: Optional[datetime] = None):
        self.store = store
        self.since = to_utc(since)
        self.summary: dict[int, ASNInfo] = {}

    def netblocks_for(self, ip_record: AssetRecord) -> list[AssetRecord]:
        """Netblocks containing the IP address."""
        return self._related(ip_record, "contains", Netblock, incoming=True)

    def announcers_for(self, netblock_record: AssetRecord) -> list[AssetRecord]:
        """Autonomous systems announcing the netblock."""
        return self._related(
            netblock_record, "announces", AutonomousSystem, incoming=True
        )

    def rir_names_for(self, asn_record: AssetRecord) -> list[str]:
        """Names of the RIR organizations managing the autonomous system."""
        orgs = self._related(asn_record, "managed_by", RIROrganization)
        return [org.asset.name for org in orgs]

    def add_ip(self, ip_record: AssetRecord):
        """Fold one IP address record into the summary."""
        if not isinstance(ip_record.asset, IPAddress):
            log.warning("Skipping record: %s", TypeMismatchError("IPAddress", ip_record))
            return

        for netblock in self.netblocks_for(ip_record):
            cidr = normalize_cidr(netblock.asset.cidr)

            for asn_record in self.announcers_for(netblock):
                number = asn_record.asset.number
                info = self.summary.setdefault(number, ASNInfo())
                info.cidrs[cidr] = info.cidrs.get(cidr, 0) + 1

                for name in self.rir_names_for(asn_record):
                    info.rir_name = name
                    # ASN 0 takes a single RIR attribution
                    if number == 0:
                        break

    def add_ips(self, ip_records: Iterable[AssetRecord]):
        for record in ip_records:
            self.add_ip(record)

    def _related(
        self, record: AssetRecord, label: str, kind: type, incoming: bool = False
    ) -> list[AssetRecord]:
        try:
            if incoming:
                rels = self.store.incoming_relations(record, self.since, label)
            else:
                rels = self.store.outgoing_relations(record, self.since, label)
        except StoreQueryError as e:
            log.debug("Failed to query %s relations of %s: %s", label, record.id, e)
            return []

        related = []
        for rel in rels:
            ref = rel.from_asset if incoming else rel.to_asset
            try:
                found = self.store.find_by_id(ref.id, self.since)
            except StoreQueryError as e:
                log.debug("Failed to resolve %s: %s", ref.id, e)
                continue
            if not isinstance(found.asset, kind):
                err = TypeMismatchError(kind.__name__, found)
                log.warning("Skipping %s relation of %s: %s", label, record.id, err)
                continue
            related.append(found)
        return related


def summarize_asns(
    ip_records: Iterable[AssetRecord],
    store: GraphStore,
    since: Optional[datetime] = None,
) -> dict[int, ASNInfo]:
    """Build the ASN summary table for a set of IP address records."""
    summarizer = ASNSummarizer(store, since)
    summarizer.add_ips(ip_records)
    return summarizer.summary
