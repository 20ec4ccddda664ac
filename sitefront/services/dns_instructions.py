"""
DNS instruction derivation.

Maps a domain + the provider's reported DNS configuration to the single record
the domain owner should create. Pure function: no I/O, deterministic.

  apex (two labels)  → A from recommended IPv4, else CNAME
  non-apex           → CNAME, else A
  neither            → no instruction
  status             → "active" unless the provider flags misconfiguration
"""
from dataclasses import dataclass
from typing import Optional

from sitefront.models.custom_domain import STATUS_ACTIVE, STATUS_PENDING
from sitefront.schemas.provider import ProviderDomainConfig


@dataclass(frozen=True)
class DnsInstruction:
    status: str
    verification_type: Optional[str] = None
    verification_name: Optional[str] = None
    verification_value: Optional[str] = None

    @property
    def has_record(self) -> bool:
        return self.verification_type is not None


def is_apex_domain(domain: str) -> bool:
    return len(domain.split(".")) == 2


def _first_ipv4(config: ProviderDomainConfig) -> Optional[str]:
    for rec in config.recommended_ipv4:
        if rec.value:
            return rec.value[0]
    return None


def _first_cname(config: ProviderDomainConfig) -> Optional[str]:
    for rec in config.recommended_cname:
        if rec.value:
            return rec.value
    return None


def derive_dns_instruction(domain: str, config: ProviderDomainConfig) -> DnsInstruction:
    status = STATUS_PENDING if config.misconfigured else STATUS_ACTIVE

    a_value = _first_ipv4(config)
    cname_value = _first_cname(config)

    if is_apex_domain(domain):
        candidates = (("A", a_value), ("CNAME", cname_value))
    else:
        candidates = (("CNAME", cname_value), ("A", a_value))

    for record_type, value in candidates:
        if value:
            return DnsInstruction(
                status=status,
                verification_type=record_type,
                verification_name=domain,
                verification_value=value,
            )

    return DnsInstruction(status=status)
