"""
Scope-rooted traversal of the asset graph.

Starting from the records matching a set of root domain names, expands the
graph level by level following the per-type expansion policy, and projects
everything it reaches into an ordered node list and edge list for
visualization writers.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import networkx as nx

from ..errors import StoreQueryError
from ..store.facade import GraphStore
from ..store.model import FQDN, AssetRecord, to_utc
from .identity import VizNode, new_node
from .policy import domain_name_in_scope, policy_for

log = logging.getLogger(__name__)

PTR_RECORD = "ptr_record"


@dataclass
class VizEdge:
    """A projected edge between two node indices."""
    source: int
    target: int
    label: str
    title: str


class _Projection:
    """Visited-node table and edge list local to one traversal."""

    def __init__(self, store: GraphStore, since: Optional[datetime]):
        self.store = store
        self.since = since
        self.nodes: list[VizNode] = []
        self.edges: list[VizEdge] = []
        self.node_to_idx: dict[str, int] = {}

    def visit(self, record: AssetRecord) -> tuple[Optional[int], bool]:
        """Index of the record's node and whether it was newly assigned."""
        node = new_node(self.store, len(self.nodes), record, self.since)
        if node is None:
            return None, False
        if node.label in self.node_to_idx:
            return self.node_to_idx[node.label], False
        self.node_to_idx[node.label] = node.id
        self.nodes.append(node)
        return node.id, True

    def link(self, source: int, target: int, rel_type: str):
        self.edges.append(
            VizEdge(source=source, target=target, label=rel_type, title=rel_type)
        )


def viz_data(
    domains: list[str],
    since: Optional[datetime],
    store: GraphStore,
) -> tuple[list[VizNode], list[VizEdge]]:
    """
    Project the graph reachable from the scope into nodes and edges.

    Nodes are deduplicated by label and returned in first-assignment order;
    edges are returned in discovery order and never deduplicated. Store
    failures on individual expansion steps drop that branch only; a failure
    of the initial scope query yields empty results.
    """
    if not domains:
        return [], []

    since = to_utc(since)
    try:
        frontier = store.find_by_scope([FQDN(name=d) for d in domains], since)
    except StoreQueryError as e:
        log.warning("Scope query failed: %s", e)
        return [], []

    proj = _Projection(store, since)
    level = 0
    while frontier:
        log.debug("Expanding level %d with %d records", level, len(frontier))
        records, frontier = frontier, []

        for record in records:
            idx, _ = proj.visit(record)
            if idx is None:
                continue

            policy = policy_for(record.asset_type)
            follow_in = policy.follow_incoming
            if policy.incoming_in_scope_only:
                follow_in = domain_name_in_scope(proj.nodes[idx].label, domains)

            if policy.follow_outgoing:
                frontier.extend(
                    _expand_outgoing(proj, record, idx, policy.outgoing_labels)
                )
            if follow_in:
                frontier.extend(
                    _expand_incoming(proj, record, idx, policy.incoming_labels)
                )
        level += 1

    return proj.nodes, proj.edges


def _expand_outgoing(
    proj: _Projection, record: AssetRecord, from_idx: int, labels: tuple
) -> list[AssetRecord]:
    try:
        rels = proj.store.outgoing_relations(record, proj.since, *labels)
    except StoreQueryError as e:
        log.debug("Outgoing relations of %s failed: %s", record.id, e)
        return []

    discovered = []
    for rel in rels:
        try:
            target = proj.store.find_by_id(rel.to_asset.id, proj.since)
        except StoreQueryError as e:
            log.debug("Lookup of %s failed: %s", rel.to_asset.id, e)
            continue

        to_idx, is_new = proj.visit(target)
        if to_idx is None:
            continue
        if is_new:
            discovered.append(target)
        proj.link(from_idx, to_idx, rel.type)
    return discovered


def _expand_incoming(
    proj: _Projection, record: AssetRecord, to_idx: int, labels: tuple
) -> list[AssetRecord]:
    try:
        rels = proj.store.incoming_relations(record, proj.since, *labels)
    except StoreQueryError as e:
        log.debug("Incoming relations of %s failed: %s", record.id, e)
        return []

    discovered = []
    for rel in rels:
        try:
            source = proj.store.find_by_id(rel.from_asset.id, proj.since)
        except StoreQueryError as e:
            log.debug("Lookup of %s failed: %s", rel.from_asset.id, e)
            continue

        from_idx, is_new = proj.visit(source)
        if from_idx is None:
            continue
        # Reverse lookups are recorded but not expanded
        if is_new and rel.type != PTR_RECORD:
            discovered.append(source)
        proj.link(from_idx, to_idx, rel.type)
    return discovered


def to_networkx(nodes: list[VizNode], edges: list[VizEdge]) -> nx.MultiDiGraph:
    """Build a MultiDiGraph from a projection, keyed by node index."""
    G = nx.MultiDiGraph()
    for node in nodes:
        G.add_node(node.id, type=node.type, label=node.label, title=node.title)
    for edge in edges:
        G.add_edge(edge.source, edge.target, label=edge.label, title=edge.title)
    return G
