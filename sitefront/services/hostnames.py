"""Hostname / subdomain normalization and validation rules."""
import re
from typing import Optional

from sitefront.exceptions import ValidationError

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
SUBDOMAIN_MIN_LENGTH = 3
SUBDOMAIN_MAX_LENGTH = 63
RESERVED_SUBDOMAINS = frozenset({"admin", "www"})

_SCHEME = re.compile(r"^https?://")
_WHITESPACE = re.compile(r"\s")


def is_valid_subdomain(value: str) -> bool:
    """Pattern + length check on an already-normalized label."""
    return (
        SUBDOMAIN_MIN_LENGTH <= len(value) <= SUBDOMAIN_MAX_LENGTH
        and SUBDOMAIN_PATTERN.match(value) is not None
    )


def validate_subdomain(raw: Optional[str], *, allow_reserved: bool = False) -> str:
    """Trim, lowercase and validate a subdomain; return the normalized value."""
    subdomain = (raw or "").strip().lower()

    if not subdomain:
        raise ValidationError("Subdomain is required.")

    if len(subdomain) < SUBDOMAIN_MIN_LENGTH or len(subdomain) > SUBDOMAIN_MAX_LENGTH:
        raise ValidationError(
            f"Subdomain must be between {SUBDOMAIN_MIN_LENGTH} and {SUBDOMAIN_MAX_LENGTH} characters."
        )

    if not SUBDOMAIN_PATTERN.match(subdomain):
        raise ValidationError(
            "Subdomain can only contain letters, numbers and dashes, "
            "and cannot start or end with a dash."
        )

    if not allow_reserved and subdomain in RESERVED_SUBDOMAINS:
        raise ValidationError(f'Subdomain "{subdomain}" is reserved.')

    return subdomain


def normalize_domain(raw: Optional[str]) -> str:
    """
    Reduce user input to a bare lowercase hostname.

    "HTTPS://Example.com:8443/path" -> "example.com"

    The port is dropped: Host-header matching compares bare hostnames.
    """
    domain = (raw or "").strip().lower()
    if not domain:
        raise ValidationError("Domain is required.")

    domain = _SCHEME.sub("", domain)

    slash = domain.find("/")
    if slash != -1:
        domain = domain[:slash]

    domain = domain.split(":", 1)[0]

    if domain.endswith("."):
        domain = domain[:-1]

    if "." not in domain or _WHITESPACE.search(domain) or "" in domain.split("."):
        raise ValidationError(
            'Please enter a valid domain name like "example.com" (no protocol, no path).'
        )

    return domain


def strip_port(host_header: Optional[str]) -> str:
    """Lowercased hostname without the ":port" suffix ("" for a missing header)."""
    host = (host_header or "").strip().lower()
    if not host:
        return ""
    if host.startswith("["):
        # [::1]:8000
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    return host.split(":", 1)[0]
