"""Tests for the in-memory graph store."""

import json
import pytest
from datetime import datetime, timezone, timedelta
from assetgraph.errors import StoreQueryError
from assetgraph.store.memory import MemoryStore
from assetgraph.store.model import FQDN, IPAddress, Netblock, AssetType

T0 = datetime(2024, 1, 5, 12, tzinfo=timezone.utc)


def _sample_store():
    store = MemoryStore()
    apex = store.add_asset(FQDN(name="example.com"), T0, T0)
    www = store.add_asset(FQDN(name="www.example.com"), T0, T0 + timedelta(hours=2))
    store.add_asset(FQDN(name="notexample.com"), T0, T0)
    old = store.add_asset(FQDN(name="old.example.com"), T0 - timedelta(days=3), T0 - timedelta(days=2))
    ip = store.add_asset(IPAddress(address="93.184.216.34"), T0, T0)
    nb = store.add_asset(Netblock(cidr="93.184.216.0/24"), T0, T0)
    store.add_relation("a_record", apex, ip)
    store.add_relation("cname_record", www, apex)
    store.add_relation("a_record", www, ip, T0 - timedelta(days=3), T0 - timedelta(days=2))
    store.add_relation("contains", nb, ip)
    return store, {"apex": apex, "www": www, "old": old, "ip": ip, "nb": nb}


class TestMemoryStore:
    def test_scope_includes_subdomains(self):
        store, _ = _sample_store()
        names = [r.asset.name for r in store.find_by_scope([FQDN(name="example.com")])]
        assert names == ["example.com", "www.example.com", "old.example.com"]

    def test_scope_is_case_insensitive(self):
        store, _ = _sample_store()
        records = store.find_by_scope([FQDN(name="EXAMPLE.COM")])
        assert len(records) == 3

    def test_scope_cutoff(self):
        store, _ = _sample_store()
        records = store.find_by_scope([FQDN(name="example.com")], T0 - timedelta(hours=1))
        assert "old.example.com" not in [r.asset.name for r in records]

    def test_scope_non_fqdn_matches_content(self):
        store, recs = _sample_store()
        records = store.find_by_scope([IPAddress(address="93.184.216.34")])
        assert [r.id for r in records] == [recs["ip"].id]

    def test_find_by_id(self):
        store, recs = _sample_store()
        assert store.find_by_id(recs["ip"].id) is recs["ip"]

    def test_find_by_id_unknown(self):
        store, _ = _sample_store()
        with pytest.raises(StoreQueryError):
            store.find_by_id("missing")

    def test_find_by_id_before_cutoff(self):
        store, recs = _sample_store()
        with pytest.raises(StoreQueryError):
            store.find_by_id(recs["old"].id, T0)

    def test_find_by_content(self):
        store, recs = _sample_store()
        found = store.find_by_content(IPAddress(address="93.184.216.34"))
        assert [r.id for r in found] == [recs["ip"].id]

    def test_find_by_type(self):
        store, _ = _sample_store()
        assert len(store.find_by_type(AssetType.FQDN)) == 4
        assert len(store.find_by_type("Netblock")) == 1

    def test_outgoing_label_filter(self):
        store, recs = _sample_store()
        rels = store.outgoing_relations(recs["www"], None, "cname_record")
        assert [r.type for r in rels] == ["cname_record"]

    def test_outgoing_order_and_all_labels(self):
        store, recs = _sample_store()
        rels = store.outgoing_relations(recs["www"])
        assert [r.type for r in rels] == ["cname_record", "a_record"]

    def test_relation_cutoff(self):
        store, recs = _sample_store()
        rels = store.outgoing_relations(recs["www"], T0)
        assert [r.type for r in rels] == ["cname_record"]

    def test_incoming(self):
        store, recs = _sample_store()
        rels = store.incoming_relations(recs["ip"], None, "contains")
        assert len(rels) == 1
        assert rels[0].from_asset is recs["nb"]

    def test_relation_unknown_record(self):
        store, recs = _sample_store()
        other = MemoryStore().add_asset(FQDN(name="x.org"), T0, T0, record_id="999")
        with pytest.raises(StoreQueryError):
            store.add_relation("a_record", other, recs["ip"])
        with pytest.raises(StoreQueryError):
            store.outgoing_relations(other)

    def test_save_and_load(self, tmp_path):
        store, recs = _sample_store()
        filepath = str(tmp_path / "assetdb.json")
        store.save(filepath)
        loaded = MemoryStore.load(filepath)
        assert len(loaded) == len(store)
        assert loaded.graph.number_of_edges() == store.graph.number_of_edges()
        assert loaded.find_by_id(recs["www"].id).last_seen == recs["www"].last_seen

    def test_from_dict(self):
        store = MemoryStore.from_dict({
            "assets": [
                {"id": "1", "type": "FQDN", "content": {"name": "example.com"},
                 "created_at": "2024-01-05T03:00:00Z", "last_seen": "2024-01-05T04:00:00Z"},
                {"id": "2", "type": "IPAddress", "content": {"address": "10.0.0.1"}},
            ],
            "relations": [{"type": "a_record", "from": "1", "to": "2"}],
        })
        rels = store.outgoing_relations(store.find_by_id("1"))
        assert rels[0].to_asset.asset.type == "IPv4"

    def test_malformed_document(self):
        with pytest.raises(StoreQueryError):
            MemoryStore.from_dict({"assets": [{"type": "FQDN", "content": {"name": "a"}}]})
        with pytest.raises(StoreQueryError):
            MemoryStore.from_dict({"assets": [], "relations": [{"type": "x", "from": "1", "to": "2"}]})

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(StoreQueryError):
            MemoryStore.load(str(tmp_path / "missing.json"))

    def test_load_invalid_json(self, tmp_path):
        filepath = tmp_path / "bad.json"
        filepath.write_text("{not json")
        with pytest.raises(StoreQueryError):
            MemoryStore.load(str(filepath))

    def test_from_dict_converts_numeric_strings(self):
        store = MemoryStore.from_dict({
            "assets": [{"id": "1", "type": "AutonomousSystem", "content": {"number": "15133"}}],
        })
        asn = store.find_by_type(AssetType.AUTONOMOUS_SYSTEM)[0]
        assert asn.asset.number == 15133
        assert asn.asset.key == "15133"

    def test_from_dict_rejects_non_numeric(self):
        with pytest.raises(StoreQueryError):
            MemoryStore.from_dict({
                "assets": [{"id": "1", "type": "AutonomousSystem", "content": {"number": "fifteen"}}],
            })
