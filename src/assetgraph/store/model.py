"""
Asset model read from the graph store.

Each asset kind is a small frozen dataclass carrying its content fields, a
type tag and a canonical content key. Store records wrap an asset with the
store-assigned identifier and the creation/last-seen timestamps; relations
are directed, labeled edges between two records.
"""

import ipaddress
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional


class AssetType(str, Enum):
    """Type tags of the asset kinds found in the graph."""
    FQDN = "FQDN"
    IP_ADDRESS = "IPAddress"
    NETBLOCK = "Netblock"
    AUTONOMOUS_SYSTEM = "AutonomousSystem"
    RIR_ORGANIZATION = "RIROrganization"
    AUTNUM_RECORD = "AutnumRecord"
    DOMAIN_RECORD = "DomainRecord"
    TLS_CERTIFICATE = "TLSCertificate"
    CONTACT_RECORD = "ContactRecord"
    LOCATION = "Location"
    PERSON = "Person"
    ORGANIZATION = "Organization"
    EMAIL_ADDRESS = "EmailAddress"
    PHONE = "Phone"
    URL = "URL"
    NETWORK_ENDPOINT = "NetworkEndpoint"
    SOCKET_ADDRESS = "SocketAddress"
    SERVICE = "Service"
    FINGERPRINT = "Fingerprint"
    SOURCE = "Source"

    def __str__(self) -> str:
        return self.value


class Asset(ABC):
    """Base class for asset kinds."""
    asset_type: ClassVar[AssetType]

    @property
    @abstractmethod
    def key(self) -> str:
        """Canonical content key."""

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class FQDN(Asset):
    name: str
    asset_type: ClassVar[AssetType] = AssetType.FQDN

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class IPAddress(Asset):
    address: str
    type: str = ""
    asset_type: ClassVar[AssetType] = AssetType.IP_ADDRESS

    def __post_init__(self):
        if not self.type and self.address:
            try:
                version = ipaddress.ip_address(self.address).version
            except ValueError:
                return
            object.__setattr__(self, "type", f"IPv{version}")

    @property
    def key(self) -> str:
        return self.address


@dataclass(frozen=True)
class Netblock(Asset):
    cidr: str
    type: str = ""
    asset_type: ClassVar[AssetType] = AssetType.NETBLOCK

    @property
    def key(self) -> str:
        return self.cidr


@dataclass(frozen=True)
class AutonomousSystem(Asset):
    number: int
    asset_type: ClassVar[AssetType] = AssetType.AUTONOMOUS_SYSTEM

    @property
    def key(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class RIROrganization(Asset):
    name: str
    rir_id: str = ""
    rir: str = ""
    asset_type: ClassVar[AssetType] = AssetType.RIR_ORGANIZATION

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class AutnumRecord(Asset):
    number: int
    handle: str = ""
    name: str = ""
    whois_server: str = ""
    status: str = ""
    asset_type: ClassVar[AssetType] = AssetType.AUTNUM_RECORD

    @property
    def key(self) -> str:
        return str(self.number)


@dataclass(frozen=True)
class DomainRecord(Asset):
    domain: str
    name: str = ""
    whois_server: str = ""
    asset_type: ClassVar[AssetType] = AssetType.DOMAIN_RECORD

    @property
    def key(self) -> str:
        return self.domain


@dataclass(frozen=True)
class TLSCertificate(Asset):
    serial_number: str
    subject_common_name: str = ""
    issuer_common_name: str = ""
    not_before: str = ""
    not_after: str = ""
    asset_type: ClassVar[AssetType] = AssetType.TLS_CERTIFICATE

    @property
    def key(self) -> str:
        return self.serial_number


@dataclass(frozen=True)
class ContactRecord(Asset):
    discovered_at: str
    asset_type: ClassVar[AssetType] = AssetType.CONTACT_RECORD

    @property
    def key(self) -> str:
        return self.discovered_at


@dataclass(frozen=True)
class Location(Asset):
    address: str
    building_number: str = ""
    street_name: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = ""
    asset_type: ClassVar[AssetType] = AssetType.LOCATION

    @property
    def key(self) -> str:
        return self.address


@dataclass(frozen=True)
class Person(Asset):
    full_name: str
    first_name: str = ""
    family_name: str = ""
    asset_type: ClassVar[AssetType] = AssetType.PERSON

    @property
    def key(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class Organization(Asset):
    name: str
    legal_name: str = ""
    asset_type: ClassVar[AssetType] = AssetType.ORGANIZATION

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class EmailAddress(Asset):
    address: str
    asset_type: ClassVar[AssetType] = AssetType.EMAIL_ADDRESS

    @property
    def key(self) -> str:
        return self.address


@dataclass(frozen=True)
class Phone(Asset):
    raw: str
    e164: str = ""
    asset_type: ClassVar[AssetType] = AssetType.PHONE

    @property
    def key(self) -> str:
        return self.e164 or self.raw


@dataclass(frozen=True)
class URL(Asset):
    url: str
    asset_type: ClassVar[AssetType] = AssetType.URL

    @property
    def key(self) -> str:
        return self.url


@dataclass(frozen=True)
class NetworkEndpoint(Asset):
    address: str
    asset_type: ClassVar[AssetType] = AssetType.NETWORK_ENDPOINT

    @property
    def key(self) -> str:
        return self.address


@dataclass(frozen=True)
class SocketAddress(Asset):
    address: str
    ip_address: str = ""
    port: int = 0
    protocol: str = ""
    asset_type: ClassVar[AssetType] = AssetType.SOCKET_ADDRESS

    @property
    def key(self) -> str:
        return self.address


@dataclass(frozen=True)
class Service(Asset):
    identifier: str
    banner: str = ""
    asset_type: ClassVar[AssetType] = AssetType.SERVICE

    @property
    def key(self) -> str:
        return self.identifier


@dataclass(frozen=True)
class Fingerprint(Asset):
    value: str
    type: str = ""
    asset_type: ClassVar[AssetType] = AssetType.FINGERPRINT

    @property
    def key(self) -> str:
        return self.value


@dataclass(frozen=True)
class Source(Asset):
    name: str
    confidence: int = 0
    asset_type: ClassVar[AssetType] = AssetType.SOURCE

    @property
    def key(self) -> str:
        return self.name


ASSET_CLASSES: dict[AssetType, type] = {
    cls.asset_type: cls
    for cls in (
        FQDN, IPAddress, Netblock, AutonomousSystem, RIROrganization,
        AutnumRecord, DomainRecord, TLSCertificate, ContactRecord, Location,
        Person, Organization, EmailAddress, Phone, URL, NetworkEndpoint,
        SocketAddress, Service, Fingerprint, Source,
    )
}


def asset_from_dict(asset_type: str, content: dict) -> Asset:
    """Build an asset of the given type tag from its content fields.

    Unknown content keys are ignored so documents written by newer
    discovery engines still load.
    """
    cls = ASSET_CLASSES[AssetType(asset_type)]
    kwargs = {}
    for f in fields(cls):
        if f.name not in content:
            continue
        value = content[f.name]
        # Numeric fields may arrive as strings
        if f.type is int and not isinstance(value, int):
            value = int(value)
        kwargs[f.name] = value
    return cls(**kwargs)


@dataclass
class AssetRecord:
    """A stored asset with its identifier and observation window."""
    id: str
    asset: Optional[Asset]
    created_at: datetime
    last_seen: datetime

    @property
    def asset_type(self) -> Optional[AssetType]:
        return self.asset.asset_type if self.asset is not None else None


@dataclass
class Relation:
    """A directed, labeled edge between two stored assets."""
    id: str
    type: str
    from_asset: AssetRecord
    to_asset: AssetRecord
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_seen: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def to_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """Normalize a timestamp to UTC; naive values are taken as UTC."""
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp (a trailing 'Z' is accepted)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(value))
