"""URL validation and sanitization for scraped links."""

import re
from typing import FrozenSet, Optional
from urllib.parse import urljoin, urlparse

from heatshop.config import BASE_URL

__all__ = [
    "URLValidationError",
    "ALLOWED_DOMAINS",
    "sanitize_url",
    "resolve_url",
    "validate_url",
    "validate_image_url",
    "is_safe_url",
]


class URLValidationError(Exception):
    """Raised when URL validation fails."""


ALLOWED_DOMAINS: FrozenSet[str] = frozenset({
    urlparse(BASE_URL).netloc.lower(),
    "www.heatershop.co.uk",
    "heatershop.co.uk",
})

DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file", "mailto"}

SUSPICIOUS_PATTERNS = (
    r"\.\./",
    r"%2e%2e",
    r"<script",
    r"javascript:",
)


def sanitize_url(url: str) -> str:
    """Strip whitespace, control characters and null bytes."""
    if not url:
        return ""
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url.strip())
    return url.replace("%00", "")


def resolve_url(href: str, base_url: str = BASE_URL) -> str:
    """Make a scraped href absolute against the site base URL."""
    href = sanitize_url(href)
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return f"https:{href}"
    return urljoin(base_url.rstrip("/") + "/", href)


def validate_url(url: str, allowed_domains: Optional[FrozenSet[str]] = None) -> str:
    """Validate a URL before fetching it.

    Args:
        url: URL to validate
        allowed_domains: Domains we may request (default: ALLOWED_DOMAINS);
            an empty set allows any domain

    Returns:
        The sanitized URL

    Raises:
        URLValidationError: If the URL is malformed, unsafe or off-site
    """
    if not url:
        raise URLValidationError("URL is empty")

    url = sanitize_url(url)
    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme: {scheme}")
    if scheme not in ("http", "https"):
        raise URLValidationError(f"Invalid URL scheme: {scheme or '(none)'}")

    domain = (parsed.hostname or "").lower()
    if not domain:
        raise URLValidationError("URL has no domain")

    domains = allowed_domains if allowed_domains is not None else ALLOWED_DOMAINS
    if domains and domain not in domains:
        raise URLValidationError(f"URL domain '{domain}' not in allowed domains")

    url_lower = url.lower()
    for pattern in SUSPICIOUS_PATTERNS:
        if re.search(pattern, url_lower):
            raise URLValidationError(f"URL contains suspicious pattern: {pattern}")

    return url


def validate_image_url(url: str) -> str:
    """Validate an image URL; any http(s) host is accepted."""
    url = sanitize_url(url)
    if not url:
        raise URLValidationError("Image URL is empty")

    scheme = urlparse(url).scheme.lower()
    if scheme not in ("http", "https"):
        raise URLValidationError(f"Invalid image URL scheme: {scheme or '(none)'}")
    return url


def is_safe_url(url: str, allowed_domains: Optional[FrozenSet[str]] = None) -> bool:
    try:
        validate_url(url, allowed_domains)
        return True
    except URLValidationError:
        return False
