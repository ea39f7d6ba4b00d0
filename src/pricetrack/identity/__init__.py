"""
URL canonicalization and content-addressed document IDs.
"""

from .ids import (
    DocumentRef,
    IdentityHasher,
    classify,
    get_hasher,
    identify,
    looks_like_document_id,
    resolve_id,
)
from .url_normalizer import CanonicalURL, URLNormalizer, get_normalizer, normalize

__all__ = [
    "URLNormalizer",
    "CanonicalURL",
    "get_normalizer",
    "normalize",
    "IdentityHasher",
    "DocumentRef",
    "classify",
    "looks_like_document_id",
    "get_hasher",
    "identify",
    "resolve_id",
]
