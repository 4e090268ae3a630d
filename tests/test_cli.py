"""Tests for the command-line interface."""

import pytest
import json
from datetime import datetime, timezone
from click.testing import CliRunner
from assetgraph.cli import cli
from assetgraph.store.memory import MemoryStore
from assetgraph.store.model import (
    FQDN, IPAddress, Netblock, AutonomousSystem, RIROrganization,
)

T0 = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


def _sample_store():
    store = MemoryStore()
    name = store.add_asset(FQDN(name="example.com"), T0, T0)
    old = store.add_asset(
        FQDN(name="old.example.com"), datetime(2024, 1, 1, tzinfo=timezone.utc), T0
    )
    ip = store.add_asset(IPAddress(address="93.184.216.34"), T0, T0)
    nb = store.add_asset(Netblock(cidr="93.184.216.0/24"), T0, T0)
    asn = store.add_asset(AutonomousSystem(number=15133), T0, T0)
    org = store.add_asset(RIROrganization(name="ARIN"), T0, T0)
    store.add_relation("a_record", name, ip)
    store.add_relation("contains", nb, ip)
    store.add_relation("announces", asn, nb)
    store.add_relation("managed_by", asn, org)
    return store


@pytest.fixture
def graph_dir(tmp_path):
    _sample_store().save(str(tmp_path / "assetdb.json"))
    return tmp_path


def _run(*args):
    return CliRunner().invoke(cli, list(args), obj={})


class TestSubs:
    def test_show(self, graph_dir):
        result = _run("subs", "-d", "example.com", "--dir", str(graph_dir), "--show", "--nocolor")
        assert result.exit_code == 0
        assert "example.com 93.184.216.34" in result.output
        assert "old.example.com" in result.output
        assert "ASN: 15133 - ARIN" in result.output
        assert "2 names discovered" in result.output

    def test_names_only(self, graph_dir):
        result = _run("subs", "-d", "example.com", "--dir", str(graph_dir), "--names", "--nocolor")
        assert result.exit_code == 0
        assert result.output.splitlines() == ["example.com", "old.example.com"]

    def test_demo(self, graph_dir):
        result = _run(
            "subs", "-d", "example.com", "--dir", str(graph_dir), "--names", "--ip",
            "--demo", "--nocolor",
        )
        assert "example.xxx xx.xxx.xxx.34" in result.output

    def test_output_file(self, graph_dir):
        out = graph_dir / "subs.txt"
        result = _run(
            "subs", "-d", "example.com", "--dir", str(graph_dir), "--show", "-o", str(out),
        )
        assert result.exit_code == 0
        text = out.read_text()
        assert "example.com 93.184.216.34" in text
        assert "\x1b[" not in text

    def test_domains_from_config(self, graph_dir):
        (graph_dir / "config.yaml").write_text("scope:\n  domains: [example.com]\n")
        result = _run("subs", "--dir", str(graph_dir), "--names", "--nocolor")
        assert "old.example.com" in result.output

    def test_without_mode_prints_help(self, graph_dir):
        result = _run("subs", "-d", "example.com", "--dir", str(graph_dir))
        assert result.exit_code == 0
        assert "--summary" in result.output

    def test_missing_database(self, tmp_path):
        result = _run("subs", "-d", "example.com", "--dir", str(tmp_path), "--names")
        assert result.exit_code == 1


class TestTrack:
    def test_since(self, graph_dir):
        result = _run(
            "track", "-d", "example.com", "--dir", str(graph_dir), "--nocolor",
            "--since", "01/05 00:00:00 2024 UTC",
        )
        assert result.exit_code == 0
        assert result.output.split() == ["example.com"]

    def test_derived_cutoff(self, graph_dir):
        result = _run("track", "-d", "example.com", "--dir", str(graph_dir), "--nocolor")
        assert result.output.split() == ["example.com"]

    def test_invalid_since(self, graph_dir):
        result = _run(
            "track", "-d", "example.com", "--dir", str(graph_dir), "--since", "yesterday",
        )
        assert result.exit_code == 1

    def test_no_domains(self, graph_dir):
        result = _run("track", "--dir", str(graph_dir))
        assert result.exit_code == 1


class TestViz:
    def test_d3(self, graph_dir):
        out = graph_dir / "graph"
        result = _run(
            "viz", "-d", "example.com", "--dir", str(graph_dir), "-f", "d3", "-o", str(out),
        )
        assert result.exit_code == 0
        with open(f"{out}.json") as f:
            data = json.load(f)
        assert len(data["nodes"]) == 5
        assert "Exported 5 nodes" in result.output

    def test_html(self, graph_dir):
        out = graph_dir / "graph"
        result = _run("viz", "-d", "example.com", "--dir", str(graph_dir), "-o", str(out))
        assert result.exit_code == 0
        assert (graph_dir / "graph.html").exists()
