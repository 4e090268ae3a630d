"""
Discovered names and their addresses.

Resolves every in-scope name to the IP address records it points at,
following CNAME chains, and builds per-name output records enriched with
the netblock, ASN and RIR of each address.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..errors import StoreQueryError
from ..store.facade import GraphStore
from ..store.model import FQDN, AssetRecord, IPAddress, to_utc
from .asn import ASNInfo, ASNSummarizer, normalize_cidr

log = logging.getLogger(__name__)

ADDRESS_LABELS = ("a_record", "aaaa_record")
CNAME_LABEL = "cname_record"
MAX_CNAME_DEPTH = 10


@dataclass
class AddressInfo:
    """One address of a discovered name."""
    ip: str
    asn: Optional[int] = None
    cidr: Optional[str] = None
    netblock: Optional[str] = None
    description: Optional[str] = None


@dataclass
class NameRecord:
    """A discovered name and its addresses."""
    name: str
    addresses: list[AddressInfo] = field(default_factory=list)


def _resolve_addresses(
    store: GraphStore, record: AssetRecord, since: Optional[datetime]
) -> list[AssetRecord]:
    """Address records reachable from a name through A/AAAA and CNAME relations."""
    found = []
    seen = {record.id}
    current = [record]

    for _ in range(MAX_CNAME_DEPTH + 1):
        aliases = []
        for rec in current:
            try:
                rels = store.outgoing_relations(rec, since, CNAME_LABEL, *ADDRESS_LABELS)
            except StoreQueryError as e:
                log.debug("DNS relations of %s failed: %s", rec.id, e)
                continue

            for rel in rels:
                if rel.to_asset.id in seen:
                    continue
                seen.add(rel.to_asset.id)
                try:
                    target = store.find_by_id(rel.to_asset.id, since)
                except StoreQueryError as e:
                    log.debug("Lookup of %s failed: %s", rel.to_asset.id, e)
                    continue

                if rel.type == CNAME_LABEL and isinstance(target.asset, FQDN):
                    aliases.append(target)
                elif rel.type in ADDRESS_LABELS and isinstance(target.asset, IPAddress):
                    found.append(target)
        if not aliases:
            break
        current = aliases

    return found


def names_to_addresses(
    domains: list[str],
    store: GraphStore,
    since: Optional[datetime] = None,
    ipv4: bool = False,
    ipv6: bool = False,
) -> dict[str, list[AssetRecord]]:
    """
    Map every in-scope name to its IP address records.

    Every name gets an entry. Addresses are only collected for the
    requested IP families; each address is expanded to all store records
    holding the same content.
    """
    if not domains:
        return {}

    since = to_utc(since)
    try:
        records = store.find_by_scope([FQDN(name=d) for d in domains], since)
    except StoreQueryError as e:
        log.warning("Scope query failed: %s", e)
        return {}

    result: dict[str, list[AssetRecord]] = {}
    for record in records:
        if not isinstance(record.asset, FQDN) or not record.asset.name:
            continue
        name = record.asset.name
        addrs = result.setdefault(name, [])
        if not ipv4 and not ipv6:
            continue

        for ip_record in _resolve_addresses(store, record, since):
            ip = ip_record.asset
            if (ip.type == "IPv4" and not ipv4) or (ip.type == "IPv6" and not ipv6):
                continue
            try:
                matches = store.find_by_content(ip, since)
            except StoreQueryError as e:
                log.debug("Content lookup of %s failed: %s", ip.address, e)
                continue

            known = {r.id for r in addrs}
            addrs.extend(r for r in matches if r.id not in known)

    return result


def discovered_names(
    domains: list[str],
    store: GraphStore,
    since: Optional[datetime] = None,
    ipv4: bool = False,
    ipv6: bool = False,
) -> tuple[list[NameRecord], dict[int, ASNInfo]]:
    """Name records sorted by name, plus the ASN summary of their addresses."""
    summarizer = ASNSummarizer(store, since)
    mapping = names_to_addresses(domains, store, since, ipv4=ipv4, ipv6=ipv6)

    results = []
    for name in sorted(mapping):
        entry = NameRecord(name=name)
        for ip_record in mapping[name]:
            summarizer.add_ip(ip_record)
            entry.addresses.append(_address_info(summarizer, ip_record))
        results.append(entry)

    return results, summarizer.summary


def _address_info(summarizer: ASNSummarizer, ip_record: AssetRecord) -> AddressInfo:
    info = AddressInfo(ip=ip_record.asset.address)

    netblocks = summarizer.netblocks_for(ip_record)
    if not netblocks:
        return info
    netblock = netblocks[0].asset
    info.netblock = netblock.cidr
    info.cidr = normalize_cidr(netblock.cidr)

    announcers = summarizer.announcers_for(netblocks[0])
    if announcers:
        asn_record = announcers[0]
        info.asn = asn_record.asset.number
        rir_names = summarizer.rir_names_for(asn_record)
        if rir_names:
            info.description = rir_names[-1]
    return info
