"""
Document ID generation.

A document ID is the content address of a page:
- document_id = sha1(canonical_url).hexdigest()
- 40 lowercase hex characters, no salt, no version prefix

Callers that may hold either a URL or a previously computed ID go through
``classify`` / ``resolve_id`` so the "is this already hashed?" heuristic lives
in one place.
"""

import hashlib
import logging
import re
from dataclasses import dataclass
from typing import Literal, Optional

from pricetrack.identity.url_normalizer import URLNormalizer, get_normalizer

logger = logging.getLogger(__name__)

# Any non-empty hex string is taken as an ID. A URL made only of hex digits is
# therefore never hashed; see DESIGN.md.
_DOCUMENT_ID_RE = re.compile(r"[a-fA-F0-9]+")


@dataclass(frozen=True)
class DocumentRef:
    """
    A value that is either a raw URL or an already computed document ID.

    Attributes:
        kind: "url" or "id"
        value: The value as supplied by the caller
    """

    kind: Literal["url", "id"]
    value: str

    @property
    def is_id(self) -> bool:
        return self.kind == "id"


def looks_like_document_id(value: str) -> bool:
    """Return True if ``value`` has the shape of a document ID (hex digits)."""
    return bool(_DOCUMENT_ID_RE.fullmatch(value))


def classify(value: object) -> DocumentRef:
    """Tag a caller-supplied value as a URL or a document ID."""
    text = str(value)
    if looks_like_document_id(text):
        return DocumentRef(kind="id", value=text)
    return DocumentRef(kind="url", value=text)


class IdentityHasher:
    """
    Derive stable document IDs from URLs.

    Usage:
        hasher = IdentityHasher()
        hasher.identify("http://www.example.com/page/?x=1")
        hasher.resolve_id("a94a8fe5ccb19ba61c4c0873d391e987982fbbd3")
    """

    def __init__(self, normalizer: Optional[URLNormalizer] = None):
        """
        Initialize the hasher.

        Args:
            normalizer: URLNormalizer to canonicalize with (shared one by default)
        """
        self.normalizer = normalizer or get_normalizer()

    def hash_canonical(self, canonical_url: str) -> str:
        """Hash an already canonical URL string."""
        return hashlib.sha1(canonical_url.encode("utf-8")).hexdigest()

    def identify(self, url: str) -> str:
        """
        Compute the document ID of a raw URL.

        Args:
            url: Raw URL string

        Returns:
            40-character lowercase hex digest of the canonical URL

        Raises:
            InvalidURL: If the URL cannot be parsed
        """
        canonical = self.normalizer.normalize(url).to_url()
        return self.hash_canonical(canonical)

    def resolve(self, ref: DocumentRef) -> str:
        """Return the document ID for a tagged reference."""
        if ref.is_id:
            return ref.value
        return self.identify(ref.value)

    def resolve_id(self, value: str) -> str:
        """
        Return the document ID for a URL or pass an existing ID through.

        Args:
            value: Raw URL or document ID

        Returns:
            ``value`` unchanged if it is a hex string, else ``identify(value)``

        Raises:
            InvalidURL: If ``value`` is treated as a URL and cannot be parsed
        """
        ref = classify(value)
        document_id = self.resolve(ref)
        logger.debug("Resolved %s %r -> %s", ref.kind, ref.value, document_id)
        return document_id


# Shared hasher instance
_hasher: Optional[IdentityHasher] = None


def get_hasher() -> IdentityHasher:
    """Get or create the shared IdentityHasher instance."""
    global _hasher
    if _hasher is None:
        _hasher = IdentityHasher()
    return _hasher


def identify(url: str) -> str:
    """Compute the document ID of ``url``; see ``IdentityHasher.identify``."""
    return get_hasher().identify(url)


def resolve_id(value: str) -> str:
    """Resolve a URL or document ID; see ``IdentityHasher.resolve_id``."""
    return get_hasher().resolve_id(value)
