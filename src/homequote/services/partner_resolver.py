"""
Host-based partner resolution.

A request host maps to a partner in two ways: an exact custom domain
binding (checked first) or a platform subdomain label. The resolver only
normalizes the host and orders the lookups; uniqueness belongs to the data
layer, so a lookup that finds more than one active partner raises
PartnerConfigurationError instead of picking one.
"""
from typing import Iterable, List, Optional, Protocol

from homequote.database.models import PartnerProfile
from homequote.utils.logging import get_logger

logger = get_logger(__name__)

# Labels that never identify a tenant
RESERVED_LABELS = frozenset({"", "www", "localhost"})


class PartnerLookup(Protocol):
    """Lookups the resolver needs; implemented by PartnerRepository"""

    def find_active_by_custom_domain(self, domain: str) -> Optional[PartnerProfile]:
        ...

    def find_active_by_subdomain(self, subdomain: str) -> Optional[PartnerProfile]:
        ...


def normalize_host(raw_host: Optional[str]) -> str:
    """Lower-case the host and drop any port and trailing dot"""
    host = (raw_host or "").strip().lower()
    host = host.split(":", 1)[0]
    return host.rstrip(".")


def strip_www(host: str) -> str:
    """Remove one leading `www.` label"""
    return host[4:] if host.startswith("www.") else host


def custom_domain_candidates(host: str) -> List[str]:
    """Hosts to try against custom_domain, in priority order"""
    # Single-label hosts (localhost, intranet names) are never custom domains
    if "." not in host:
        return []
    candidates = [host]
    bare = strip_www(host)
    if "." in bare and bare != host:
        candidates.append(bare)
    return candidates


def candidate_subdomain(host: str, reserved: Iterable[str] = ()) -> Optional[str]:
    """First label of the no-www host, unless it is reserved"""
    label = strip_www(host).split(".", 1)[0]
    if label in RESERVED_LABELS or label in set(reserved):
        return None
    return label


def resolve_partner(
    hostname: Optional[str],
    lookup: PartnerLookup,
    reserved_subdomains: Iterable[str] = (),
) -> Optional[PartnerProfile]:
    """
    Map an inbound request hostname to an active partner.

    Args:
        hostname: Raw Host header value (may carry a port)
        lookup: Data access for custom domain and subdomain matches
        reserved_subdomains: Extra labels that never identify a partner

    Returns:
        The matching partner, or None when the host identifies no tenant

    Raises:
        PartnerConfigurationError: If a lookup matches more than one active partner
    """
    host = normalize_host(hostname)

    for domain in custom_domain_candidates(host):
        partner = lookup.find_active_by_custom_domain(domain)
        if partner is not None:
            logger.debug(f"[cyan]Resolved partner by custom domain:[/cyan] {domain} -> {partner.user_id}")
            return partner

    label = candidate_subdomain(host, reserved_subdomains)
    if label is not None:
        partner = lookup.find_active_by_subdomain(label)
        if partner is not None:
            logger.debug(f"[cyan]Resolved partner by subdomain:[/cyan] {label} -> {partner.user_id}")
            return partner

    logger.debug(f"[dim]No partner found for host:[/dim] {host!r}")
    return None
