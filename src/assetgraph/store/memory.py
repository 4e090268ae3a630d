"""
In-memory graph store.

Holds asset records as nodes and relations as keyed edges of a NetworkX
MultiDiGraph, and answers the facade queries against it. Graphs are built
programmatically with ``add_asset``/``add_relation`` or loaded from a JSON
document of the form::

    {"assets": [{"id": "1", "type": "FQDN", "content": {"name": "example.com"},
                 "created_at": "2024-01-05T03:00:00Z",
                 "last_seen": "2024-01-05T03:00:00Z"}],
     "relations": [{"id": "r1", "type": "a_record", "from": "1", "to": "2",
                    "created_at": "...", "last_seen": "..."}]}
"""

import itertools
import json
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

import networkx as nx

from ..errors import StoreQueryError
from .facade import GraphStore
from .model import (
    FQDN,
    Asset,
    AssetRecord,
    AssetType,
    Relation,
    asset_from_dict,
    parse_timestamp,
    to_utc,
)

log = logging.getLogger(__name__)


def _visible(item, since: Optional[datetime]) -> bool:
    return since is None or item.last_seen >= since


class MemoryStore(GraphStore):
    """
    Graph store backed by a NetworkX MultiDiGraph.

    Node keys are record identifiers; edge keys are relation identifiers.
    Relations are returned in insertion order.
    """

    def __init__(self):
        self.graph = nx.MultiDiGraph()
        self._ids = itertools.count(1)
        self._seq = itertools.count()
        self._relation_ids = itertools.count(1)

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    # -- building -----------------------------------------------------------

    def add_asset(
        self,
        asset: Asset,
        created_at: Optional[datetime] = None,
        last_seen: Optional[datetime] = None,
        record_id: Optional[str] = None,
    ) -> AssetRecord:
        """Add an asset record and return it."""
        now = datetime.now(timezone.utc)
        created = to_utc(created_at) or now
        record = AssetRecord(
            id=record_id or self._next_id(),
            asset=asset,
            created_at=created,
            last_seen=to_utc(last_seen) or created,
        )
        self.graph.add_node(record.id, record=record)
        return record

    def add_relation(
        self,
        rel_type: str,
        from_record: AssetRecord,
        to_record: AssetRecord,
        created_at: Optional[datetime] = None,
        last_seen: Optional[datetime] = None,
        relation_id: Optional[str] = None,
    ) -> Relation:
        """Add a directed relation between two records already in the store."""
        for record in (from_record, to_record):
            if record.id not in self.graph:
                raise StoreQueryError(f"Unknown asset id: {record.id}")

        created = to_utc(created_at) or max(from_record.created_at, to_record.created_at)
        relation = Relation(
            id=relation_id or f"r{next(self._relation_ids)}",
            type=rel_type,
            from_asset=from_record,
            to_asset=to_record,
            created_at=created,
            last_seen=to_utc(last_seen) or created,
        )
        self.graph.add_edge(
            from_record.id,
            to_record.id,
            key=relation.id,
            relation=relation,
            seq=next(self._seq),
        )
        return relation

    def _next_id(self) -> str:
        while True:
            candidate = str(next(self._ids))
            if candidate not in self.graph:
                return candidate

    # -- facade -------------------------------------------------------------

    def records(self, since: Optional[datetime] = None) -> list[AssetRecord]:
        """All visible records in insertion order."""
        return [
            data["record"]
            for _, data in self.graph.nodes(data=True)
            if _visible(data["record"], since)
        ]

    def find_by_scope(
        self, assets: Iterable[Asset], since: Optional[datetime] = None
    ) -> list[AssetRecord]:
        since = to_utc(since)
        assets = list(assets)
        names = [
            a.name.strip().lower() for a in assets if isinstance(a, FQDN) and a.name
        ]
        others = [a for a in assets if not isinstance(a, FQDN)]

        results = []
        for record in self.records(since):
            asset = record.asset
            if isinstance(asset, FQDN):
                if _name_in_scope(asset.name, names):
                    results.append(record)
            elif asset in others:
                results.append(record)
        return results

    def find_by_id(
        self, record_id: str, since: Optional[datetime] = None
    ) -> AssetRecord:
        if record_id not in self.graph:
            raise StoreQueryError(f"No asset with id {record_id}")
        record = self.graph.nodes[record_id]["record"]
        if not _visible(record, to_utc(since)):
            raise StoreQueryError(f"Asset {record_id} not seen since {since}")
        return record

    def find_by_content(
        self, asset: Asset, since: Optional[datetime] = None
    ) -> list[AssetRecord]:
        return [r for r in self.records(to_utc(since)) if r.asset == asset]

    def find_by_type(
        self, asset_type: AssetType, since: Optional[datetime] = None
    ) -> list[AssetRecord]:
        asset_type = AssetType(asset_type)
        return [r for r in self.records(to_utc(since)) if r.asset_type == asset_type]

    def outgoing_relations(
        self, record: AssetRecord, since: Optional[datetime] = None, *labels: str
    ) -> list[Relation]:
        if record.id not in self.graph:
            raise StoreQueryError(f"No asset with id {record.id}")
        edges = self.graph.out_edges(record.id, keys=True, data=True)
        return self._select(edges, to_utc(since), labels)

    def incoming_relations(
        self, record: AssetRecord, since: Optional[datetime] = None, *labels: str
    ) -> list[Relation]:
        if record.id not in self.graph:
            raise StoreQueryError(f"No asset with id {record.id}")
        edges = self.graph.in_edges(record.id, keys=True, data=True)
        return self._select(edges, to_utc(since), labels)

    @staticmethod
    def _select(edges, since, labels) -> list[Relation]:
        ordered = sorted(edges, key=lambda e: e[3]["seq"])
        return [
            data["relation"]
            for _, _, _, data in ordered
            if (not labels or data["relation"].type in labels)
            and _visible(data["relation"], since)
        ]

    # -- serialization ------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize the store to the JSON document layout."""
        assets = [
            {
                "id": r.id,
                "type": str(r.asset_type),
                "content": r.asset.to_dict(),
                "created_at": r.created_at.isoformat(),
                "last_seen": r.last_seen.isoformat(),
            }
            for r in self.records()
        ]
        relations = []
        ordered = sorted(self.graph.edges(keys=True, data=True), key=lambda e: e[3]["seq"])
        for _, _, _, data in ordered:
            rel = data["relation"]
            relations.append({
                "id": rel.id,
                "type": rel.type,
                "from": rel.from_asset.id,
                "to": rel.to_asset.id,
                "created_at": rel.created_at.isoformat(),
                "last_seen": rel.last_seen.isoformat(),
            })
        return {"assets": assets, "relations": relations}

    @classmethod
    def from_dict(cls, data: dict) -> "MemoryStore":
        """Build a store from the JSON document layout."""
        store = cls()
        try:
            for entry in data.get("assets", []):
                asset = asset_from_dict(entry["type"], entry.get("content", {}))
                store.add_asset(
                    asset,
                    created_at=_timestamp(entry.get("created_at")),
                    last_seen=_timestamp(entry.get("last_seen")),
                    record_id=str(entry["id"]),
                )
            for entry in data.get("relations", []):
                store.add_relation(
                    entry["type"],
                    store.find_by_id(str(entry["from"])),
                    store.find_by_id(str(entry["to"])),
                    created_at=_timestamp(entry.get("created_at")),
                    last_seen=_timestamp(entry.get("last_seen")),
                    relation_id=str(entry["id"]) if "id" in entry else None,
                )
        except (KeyError, TypeError, ValueError) as e:
            raise StoreQueryError(f"Malformed asset graph document: {e}") from e

        log.debug(
            "Loaded %d assets and %d relations",
            store.graph.number_of_nodes(),
            store.graph.number_of_edges(),
        )
        return store

    @classmethod
    def load(cls, filepath: str) -> "MemoryStore":
        """Load a store from a JSON file."""
        try:
            with open(filepath) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreQueryError(f"Failed to read {filepath}: {e}") from e
        return cls.from_dict(data)

    def save(self, filepath: str):
        """Write the store to a JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)


def _timestamp(value: Optional[str]) -> Optional[datetime]:
    return parse_timestamp(value) if value else None


def _name_in_scope(name: str, scope: list[str]) -> bool:
    n = name.strip().lower()
    return any(n == d or n.endswith("." + d) for d in scope)
