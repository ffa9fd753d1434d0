"""
Subdomain allocation and format validation utilities.

This module handles the two pure operations around store subdomains:
- Allocation: derive a slug from a store name and append random entropy
- Validation: syntactic DNS-label check plus a reserved-name list

Uniqueness is NOT checked here; the store registry owns that rule.
"""

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SUBDOMAIN_PATTERN = re.compile(r"[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?")
RESERVED_SUBDOMAINS = frozenset({"www", "api", "admin", "mail"})

MIN_SUBDOMAIN_LENGTH = 3
MAX_SUBDOMAIN_LENGTH = 63
BASE_KEY_MAX_LENGTH = 15
SUFFIX_BYTES = 3

# Used when a name has no usable [a-z0-9] characters at all
FALLBACK_BASE_KEY = "store"

INVALID_FORMAT_MESSAGE = (
    "Invalid subdomain format. Must be 3-63 characters, lowercase letters, numbers, and hyphens only."
)


@dataclass(frozen=True)
class SubdomainValidation:
    """Result of a syntactic subdomain check."""

    is_valid: bool
    reason: Optional[str] = None


def slugify_store_name(store_name: str) -> str:
    """
    Derive the base key of a subdomain from a human-supplied name.

    Args:
        store_name: Display name (e.g., "Jane's Bakery!!")

    Returns:
        Lowercase slug of at most 15 characters (e.g., "janes-bakery")
    """
    base_key = store_name.lower()
    # Apostrophes join words instead of splitting them ("jane's" -> "janes")
    base_key = re.sub(r"['’]", "", base_key)
    base_key = re.sub(r"[^a-z0-9]", "-", base_key)
    base_key = re.sub(r"-+", "-", base_key)
    base_key = base_key.strip("-")
    base_key = base_key[:BASE_KEY_MAX_LENGTH].rstrip("-")
    return base_key or FALLBACK_BASE_KEY


def generate_unique_subdomain(store_name: str) -> str:
    """
    Generate a subdomain candidate for a store name.

    The slug is followed by a hyphen and 6 hex characters drawn from a
    cryptographically secure source. Collisions remain possible; callers
    resolve them against the registry.

    Args:
        store_name: Display name of the store

    Returns:
        Subdomain candidate (e.g., "janes-bakery-3fa9c1")
    """
    random_suffix = secrets.token_hex(SUFFIX_BYTES)
    subdomain = f"{slugify_store_name(store_name or '')}-{random_suffix}"
    logger.debug(f"Generated subdomain '{subdomain}' for store name '{store_name}'")
    return subdomain


def validate_subdomain(subdomain: object) -> SubdomainValidation:
    """
    Check that a candidate is a usable store subdomain.

    Rules:
    - matches ^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$
    - 3 to 63 characters long
    - not one of the reserved names (www, api, admin, mail)

    Args:
        subdomain: Candidate subdomain

    Returns:
        SubdomainValidation with is_valid and, when invalid, the failing rule
    """
    if not isinstance(subdomain, str):
        return SubdomainValidation(is_valid=False, reason="Subdomain must be a string")

    if not SUBDOMAIN_PATTERN.fullmatch(subdomain):
        return SubdomainValidation(is_valid=False, reason="Subdomain contains invalid characters")

    if not MIN_SUBDOMAIN_LENGTH <= len(subdomain) <= MAX_SUBDOMAIN_LENGTH:
        return SubdomainValidation(
            is_valid=False,
            reason=f"Subdomain must be {MIN_SUBDOMAIN_LENGTH}-{MAX_SUBDOMAIN_LENGTH} characters long",
        )

    if subdomain in RESERVED_SUBDOMAINS:
        return SubdomainValidation(is_valid=False, reason=f"Subdomain '{subdomain}' is reserved")

    return SubdomainValidation(is_valid=True)


def build_full_domain(subdomain: str, main_domain: str) -> str:
    """Join a store subdomain with the main domain."""
    return f"{subdomain}.{main_domain}"
