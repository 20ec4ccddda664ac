"""Table-driven tests for DNS instruction derivation."""
import pytest

from sitefront.schemas.provider import ProviderDomainConfig
from sitefront.services.dns_instructions import DnsInstruction, derive_dns_instruction, is_apex_domain

IP = "76.76.21.21"
CNAME = "cname.vercel-dns.com"


def _config(ipv4=None, cname=None, misconfigured=False):
    return ProviderDomainConfig.model_validate({
        "recommendedIPv4": [{"rank": 1, "value": ipv4}] if ipv4 else [],
        "recommendedCNAME": [{"rank": 1, "value": cname}] if cname else [],
        "misconfigured": misconfigured,
    })


def test_apex_prefers_a_record():
    dns = derive_dns_instruction("example.com", _config(ipv4=[IP], misconfigured=False))
    assert dns == DnsInstruction(
        status="active",
        verification_type="A",
        verification_name="example.com",
        verification_value=IP,
    )


def test_subdomain_prefers_cname_and_is_pending_when_misconfigured():
    dns = derive_dns_instruction("app.example.com", _config(cname=CNAME, misconfigured=True))
    assert dns.status == "pending"
    assert dns.verification_type == "CNAME"
    assert dns.verification_name == "app.example.com"
    assert dns.verification_value == CNAME


@pytest.mark.parametrize(
    "domain, ipv4, cname, expected_type, expected_value",
    [
        ("example.com", [IP], CNAME, "A", IP),
        ("example.com", None, CNAME, "CNAME", CNAME),
        ("example.com", [IP, "76.76.21.22"], None, "A", IP),
        ("www.example.com", [IP], CNAME, "CNAME", CNAME),
        ("www.example.com", [IP], None, "A", IP),
        ("a.b.example.co", None, CNAME, "CNAME", CNAME),
    ],
)
def test_record_preference(domain, ipv4, cname, expected_type, expected_value):
    dns = derive_dns_instruction(domain, _config(ipv4=ipv4, cname=cname))
    assert (dns.verification_type, dns.verification_value) == (expected_type, expected_value)
    assert dns.verification_name == domain
    assert dns.has_record


@pytest.mark.parametrize("misconfigured, status", [(True, "pending"), (False, "active")])
def test_no_recommendation_gives_no_record(misconfigured, status):
    dns = derive_dns_instruction("example.com", _config(misconfigured=misconfigured))
    assert dns == DnsInstruction(status=status)
    assert not dns.has_record


def test_empty_ipv4_value_list_is_skipped():
    config = ProviderDomainConfig.model_validate({
        "recommendedIPv4": [{"rank": 1, "value": []}, {"rank": 2, "value": [IP]}],
        "recommendedCNAME": [],
        "misconfigured": True,
    })
    assert derive_dns_instruction("example.com", config).verification_value == IP


def test_deterministic():
    config = _config(ipv4=[IP], cname=CNAME, misconfigured=True)
    assert derive_dns_instruction("shop.example.com", config) == derive_dns_instruction("shop.example.com", config)


@pytest.mark.parametrize(
    "domain, apex",
    [("example.com", True), ("www.example.com", False), ("a.b.c.example.com", False), ("localhost", False)],
)
def test_is_apex_domain(domain, apex):
    assert is_apex_domain(domain) is apex
