"""
Hostname → tenant resolution.

resolve_tenant() only understands wildcard roots:

    Host: acme.example.com     roots=["example.com"]  → subdomain "acme"
    Host: a.b.example.com      roots=["example.com"]  → subdomain "a" ("b" is dropped)
    Host: example.com          roots=["example.com"]  → None (bare root)
    Host: anything             roots=[]               → None

resolve_request_tenant() adds the custom-domain fallback used by the HTTP
layer: a dotted host outside every wildcard root is looked up as a
customer-owned domain.

Roots are matched in order, first match wins; configure roots that are not
suffixes of one another.
"""
import ipaddress
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sitefront.services.hostnames import strip_port

logger = logging.getLogger("sitefront.resolver")

KIND_SUBDOMAIN = "subdomain"
KIND_CUSTOM_DOMAIN = "custom_domain"


@dataclass(frozen=True)
class TenantRef:
    kind: str
    value: str

    @property
    def cache_key(self) -> str:
        return f"{self.kind}:{self.value}"


def _hostname(host_header: Optional[str]) -> str:
    return strip_port(host_header).rstrip(".")


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def _match_root(host: str, roots: Iterable[str]) -> Optional[str]:
    for root in roots:
        if host == root or host.endswith(f".{root}"):
            return root
    return None


def resolve_tenant(host_header: Optional[str], wildcard_roots: Iterable[str]) -> Optional[TenantRef]:
    roots = list(wildcard_roots)
    if not roots:
        return None

    host = _hostname(host_header)
    if not host:
        return None

    root = _match_root(host, roots)
    if root is None:
        logger.debug("No wildcard root matched host %s", host)
        return None

    if host == root:
        return None

    remainder = host[: -(len(root) + 1)]
    subdomain = remainder.split(".")[0]
    if not subdomain:
        return None

    return TenantRef(kind=KIND_SUBDOMAIN, value=subdomain)


def resolve_request_tenant(
    host_header: Optional[str], wildcard_roots: Iterable[str]
) -> Optional[TenantRef]:
    roots = list(wildcard_roots)
    host = _hostname(host_header)
    if not host:
        return None

    if _match_root(host, roots) is not None:
        return resolve_tenant(host, roots)

    if "." not in host or _is_ip_literal(host):
        # localhost, bare labels, IP addresses
        return None

    return TenantRef(kind=KIND_CUSTOM_DOMAIN, value=host)
