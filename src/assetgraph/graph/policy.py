"""
Per-type expansion policy for the traversal engine.

Decides, for each asset kind, whether the traversal follows outgoing
relations, incoming relations, or both, and which relation labels it
restricts itself to. An empty label tuple means every label.
"""

from dataclasses import dataclass

from ..store.model import AssetType


@dataclass(frozen=True)
class ExpansionPolicy:
    follow_outgoing: bool = False
    outgoing_labels: tuple[str, ...] = ()
    follow_incoming: bool = False
    incoming_labels: tuple[str, ...] = ()
    # FQDNs follow incoming relations only when inside the traversal scope
    incoming_in_scope_only: bool = False


NO_EXPANSION = ExpansionPolicy()
OUTGOING_ONLY = ExpansionPolicy(follow_outgoing=True)

POLICIES: dict[AssetType, ExpansionPolicy] = {
    AssetType.FQDN: ExpansionPolicy(
        follow_outgoing=True,
        follow_incoming=True,
        incoming_in_scope_only=True,
    ),
    AssetType.IP_ADDRESS: ExpansionPolicy(
        follow_outgoing=True,
        follow_incoming=True,
        incoming_labels=("contains",),
    ),
    AssetType.NETBLOCK: ExpansionPolicy(
        follow_incoming=True,
        incoming_labels=("announces",),
    ),
    AssetType.AUTONOMOUS_SYSTEM: ExpansionPolicy(
        follow_outgoing=True,
        outgoing_labels=("registration",),
    ),
    AssetType.AUTNUM_RECORD: OUTGOING_ONLY,
    AssetType.SOCKET_ADDRESS: OUTGOING_ONLY,
    AssetType.NETWORK_ENDPOINT: OUTGOING_ONLY,
    AssetType.CONTACT_RECORD: OUTGOING_ONLY,
    AssetType.EMAIL_ADDRESS: OUTGOING_ONLY,
    AssetType.LOCATION: OUTGOING_ONLY,
    AssetType.PHONE: OUTGOING_ONLY,
    AssetType.ORGANIZATION: OUTGOING_ONLY,
    AssetType.PERSON: OUTGOING_ONLY,
    AssetType.TLS_CERTIFICATE: OUTGOING_ONLY,
    AssetType.URL: OUTGOING_ONLY,
    AssetType.DOMAIN_RECORD: OUTGOING_ONLY,
    AssetType.SERVICE: OUTGOING_ONLY,
    AssetType.FINGERPRINT: NO_EXPANSION,
    AssetType.SOURCE: NO_EXPANSION,
}


def policy_for(asset_type) -> ExpansionPolicy:
    """Expansion policy of an asset type; unknown types are not expanded."""
    return POLICIES.get(asset_type, NO_EXPANSION)


def domain_name_in_scope(name: str, scope: list[str]) -> bool:
    """True if the name equals or is a subdomain of any scope name."""
    n = name.strip().lower()
    for d in scope:
        d = d.lower()
        if n == d or n.endswith("." + d):
            return True
    return False
