"""Tests for the traversal expansion policy."""

import pytest
from assetgraph.graph.policy import POLICIES, NO_EXPANSION, policy_for, domain_name_in_scope
from assetgraph.store.model import AssetType


class TestPolicy:
    def test_fqdn(self):
        p = policy_for(AssetType.FQDN)
        assert p.follow_outgoing and p.outgoing_labels == ()
        assert p.follow_incoming and p.incoming_in_scope_only

    def test_ip_address(self):
        p = policy_for(AssetType.IP_ADDRESS)
        assert p.follow_outgoing and p.outgoing_labels == ()
        assert p.follow_incoming and p.incoming_labels == ("contains",)

    def test_netblock(self):
        p = policy_for(AssetType.NETBLOCK)
        assert not p.follow_outgoing
        assert p.incoming_labels == ("announces",)

    def test_autonomous_system(self):
        p = policy_for(AssetType.AUTONOMOUS_SYSTEM)
        assert p.outgoing_labels == ("registration",)
        assert not p.follow_incoming

    @pytest.mark.parametrize("atype", [
        AssetType.SOCKET_ADDRESS, AssetType.NETWORK_ENDPOINT, AssetType.EMAIL_ADDRESS,
        AssetType.URL, AssetType.LOCATION, AssetType.PHONE, AssetType.ORGANIZATION,
        AssetType.PERSON, AssetType.TLS_CERTIFICATE, AssetType.DOMAIN_RECORD,
        AssetType.SERVICE, AssetType.AUTNUM_RECORD,
    ])
    def test_outgoing_only(self, atype):
        p = policy_for(atype)
        assert p.follow_outgoing and p.outgoing_labels == ()
        assert not p.follow_incoming

    def test_not_expanded(self):
        assert policy_for(AssetType.FINGERPRINT) == NO_EXPANSION
        assert policy_for(AssetType.SOURCE) == NO_EXPANSION
        assert policy_for(AssetType.RIR_ORGANIZATION) == NO_EXPANSION
        assert policy_for("Unknown") == NO_EXPANSION

    def test_every_type_has_policy_or_default(self):
        for atype in AssetType:
            assert policy_for(atype) is POLICIES.get(atype, NO_EXPANSION)


class TestScope:
    def test_exact_and_subdomain(self):
        assert domain_name_in_scope("example.com", ["example.com"])
        assert domain_name_in_scope("www.example.com", ["example.com"])
        assert domain_name_in_scope(" WWW.Example.COM ", ["EXAMPLE.com"])

    def test_out_of_scope(self):
        assert not domain_name_in_scope("notexample.com", ["example.com"])
        assert not domain_name_in_scope("example.org", ["example.com"])
        assert not domain_name_in_scope("example.com", [])
