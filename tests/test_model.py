"""Tests for the asset model."""

import pytest
from datetime import datetime, timezone, timedelta
from assetgraph.store.model import (
    Asset, FQDN, IPAddress, AutonomousSystem, Phone, Location, AssetType,
    asset_from_dict, parse_timestamp, to_utc,
)


class TestAssets:
    def test_keys(self):
        assert FQDN(name="example.com").key == "example.com"
        assert AutonomousSystem(number=15133).key == "15133"
        assert Phone(raw="555-0100", e164="+15550100").key == "+15550100"
        assert Phone(raw="555-0100").key == "555-0100"

    def test_ip_type_derived(self):
        assert IPAddress(address="93.184.216.34").type == "IPv4"
        assert IPAddress(address="2606:2800:220:1::1").type == "IPv6"
        assert IPAddress(address="not-an-ip").type == ""

    def test_asset_type_tags(self):
        assert FQDN(name="a").asset_type == AssetType.FQDN
        assert str(AssetType.IP_ADDRESS) == "IPAddress"

    def test_equality_by_content(self):
        assert IPAddress(address="10.0.0.1") == IPAddress(address="10.0.0.1", type="IPv4")

    def test_from_dict_ignores_unknown_keys(self):
        loc = asset_from_dict("Location", {"address": "1 Main St", "city": "Springfield", "gps": "x"})
        assert isinstance(loc, Location)
        assert loc.city == "Springfield"

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError):
            asset_from_dict("Spaceship", {"name": "x"})

    def test_from_dict_numeric_strings(self):
        assert asset_from_dict("AutonomousSystem", {"number": "15133"}).number == 15133
        sock = asset_from_dict("SocketAddress", {"address": "10.0.0.1:443", "port": "443"})
        assert sock.port == 443
        assert asset_from_dict("Source", {"name": "DNS", "confidence": "90"}).confidence == 90

    def test_from_dict_non_numeric(self):
        with pytest.raises(ValueError):
            asset_from_dict("AutnumRecord", {"number": "AS15133"})

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            Asset()


class TestTimestamps:
    def test_parse_zulu(self):
        ts = parse_timestamp("2024-01-05T03:00:00Z")
        assert ts == datetime(2024, 1, 5, 3, tzinfo=timezone.utc)

    def test_parse_offset(self):
        ts = parse_timestamp("2024-01-05T05:00:00+02:00")
        assert ts == datetime(2024, 1, 5, 3, tzinfo=timezone.utc)

    def test_to_utc_naive(self):
        ts = to_utc(datetime(2024, 1, 5, 3))
        assert ts.tzinfo == timezone.utc
        assert ts.hour == 3

    def test_to_utc_converts(self):
        ts = to_utc(datetime(2024, 1, 5, 3, tzinfo=timezone(timedelta(hours=-5))))
        assert ts.hour == 8

    def test_to_utc_none(self):
        assert to_utc(None) is None
