"""
URL normalization and canonicalization.

Every URL that reaches the tracker is collapsed to one canonical form before it
is hashed or compared against the rule table:
- Force the scheme to https
- Strip the fragment
- Strip a leading ``www.`` from the host
- Remove the trailing slash from the path
- Drop the query string entirely

The pipeline order is fixed so that document IDs stay stable across releases.
"""

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from publicsuffixlist import PublicSuffixList

from pricetrack.errors import InvalidURL

logger = logging.getLogger(__name__)

CANONICAL_SCHEME = "https"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_HOST_RE = re.compile(r"^[a-z0-9_\-]+(\.[a-z0-9_\-]+)*\.?$")
_WWW_RE = re.compile(r"^www\.(?!www\.)(?=[^.]+\..)")


@dataclass(frozen=True)
class CanonicalURL:
    """
    Canonical URL components.

    Attributes:
        host: Lowercase host in ASCII (punycode for IDN), ``www.`` stripped
        port: Explicit non-default port (None otherwise)
        path: Path without trailing slash (empty for the root)
        domain: eTLD+1 of the host, for grouping and display
        raw: Original raw URL
    """

    host: str
    port: Optional[int]
    path: str
    domain: str
    raw: str

    @property
    def scheme(self) -> str:
        return CANONICAL_SCHEME

    @property
    def netloc(self) -> str:
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    def to_url(self) -> str:
        """Reconstruct the canonical URL string."""
        return f"{CANONICAL_SCHEME}://{self.netloc}{self.path}"


class URLNormalizer:
    """
    URL canonicalization engine.

    Usage:
        normalizer = URLNormalizer()
        result = normalizer.normalize("HTTP://WWW.Example.com/Page/?utm_source=x#frag")
        print(result.to_url())  # https://example.com/Page
        print(result.domain)    # example.com
    """

    # Ports implied by the scheme the URL was written with
    DEFAULT_PORTS = {
        "http": 80,
        "https": 443,
    }

    def __init__(self):
        """Initialize normalizer with Public Suffix List."""
        self.psl = PublicSuffixList()

    def normalize(self, url: str) -> CanonicalURL:
        """
        Canonicalize a URL.

        Args:
            url: Raw URL string

        Returns:
            CanonicalURL with all components normalized

        Raises:
            InvalidURL: If the URL cannot be parsed
        """
        if not url or not isinstance(url, str) or not url.strip():
            raise InvalidURL(url, "empty or not a string")

        text = url.strip()
        if not _SCHEME_RE.match(text):
            # Bare hosts (example.com/a) and protocol-relative URLs (//example.com/a)
            text = "http:" + text if text.startswith("//") else "http://" + text

        try:
            parsed = urlsplit(text)
            port = parsed.port
        except ValueError as e:
            raise InvalidURL(url, str(e)) from e

        scheme = parsed.scheme.lower()
        host = self.canonical_host(parsed.hostname, url)
        port = self._normalize_port(port, scheme)
        path = self._normalize_path(parsed.path)

        return CanonicalURL(
            host=host,
            port=port,
            path=path,
            domain=self._extract_domain(host),
            raw=url,
        )

    def canonical_host(self, host: Optional[str], url: object = None) -> str:
        """
        Normalize a host: lowercase, punycode, strip one leading ``www.``.

        Args:
            host: Hostname as produced by the URL parser
            url: Original input, used in error messages

        Returns:
            Canonical host

        Raises:
            InvalidURL: If the host is missing or contains invalid characters
        """
        if url is None:
            url = host
        if not host:
            raise InvalidURL(url, "URL must have a host")

        host = host.lower()

        # IPv6 literals come back from urlsplit without brackets
        if ":" in host:
            return f"[{host}]"

        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError as e:
            raise InvalidURL(url, f"invalid host {host!r}") from e

        if not _HOST_RE.match(host):
            raise InvalidURL(url, f"invalid host {host!r}")

        return _WWW_RE.sub("", host, count=1)

    def _normalize_port(self, port: Optional[int], scheme: str) -> Optional[int]:
        """
        Drop the port when it is the default for the original scheme, or for
        https once the scheme has been forced.
        """
        if port is None:
            return None
        if port in (self.DEFAULT_PORTS.get(scheme), self.DEFAULT_PORTS[CANONICAL_SCHEME]):
            return None
        return port

    def _normalize_path(self, path: str) -> str:
        """
        Remove the trailing slash. Internal double slashes are preserved.

        A run of trailing slashes is removed as a whole so that normalizing a
        canonical URL again is a no-op.
        """
        return path.rstrip("/")

    def _extract_domain(self, host: str) -> str:
        """
        Extract eTLD+1 using the Public Suffix List.

        Falls back to the host for IP addresses, ``localhost`` and hosts the
        list does not cover.
        """
        bare = host.strip("[]")
        try:
            ipaddress.ip_address(bare)
            return host
        except ValueError:
            pass

        domain = self.psl.privatesuffix(bare)
        return domain or host


# Shared normalizer; it only holds the read-only suffix list
_normalizer: Optional[URLNormalizer] = None


def get_normalizer() -> URLNormalizer:
    """Get or create the shared URLNormalizer instance."""
    global _normalizer
    if _normalizer is None:
        _normalizer = URLNormalizer()
    return _normalizer


def normalize(url: str) -> str:
    """
    Return the canonical URL string for ``url``.

    Raises:
        InvalidURL: If the URL cannot be parsed
    """
    canonical = get_normalizer().normalize(url).to_url()
    logger.debug("Normalized %r -> %s", url, canonical)
    return canonical
