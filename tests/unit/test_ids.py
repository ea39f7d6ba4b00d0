"""Unit tests for document ID generation and resolution."""

import hashlib

import pytest

from pricetrack.errors import InvalidURL
from pricetrack.identity import (
    DocumentRef,
    IdentityHasher,
    URLNormalizer,
    classify,
    identify,
    looks_like_document_id,
    resolve_id,
)


class TestIdentityHasher:
    """Test suite for IdentityHasher."""

    @pytest.fixture
    def hasher(self):
        """Create an IdentityHasher with its own normalizer."""
        return IdentityHasher(URLNormalizer())

    def test_identify_is_sha1_of_canonical_url(self, hasher):
        """Test the ID is the SHA-1 hex digest of the canonical URL."""
        expected = hashlib.sha1(b"https://example.com/page").hexdigest()
        assert hasher.identify("http://www.example.com/page/?x=1") == expected

    def test_identify_shape(self, hasher):
        """Test IDs are 40 lowercase hex characters."""
        document_id = hasher.identify("https://example.com/page")
        assert len(document_id) == 40
        assert document_id == document_id.lower()
        assert all(c in "0123456789abcdef" for c in document_id)

    def test_identify_consistent(self, hasher):
        """Test the same URL always gets the same ID."""
        assert hasher.identify("https://example.com/page") == hasher.identify(
            "https://example.com/page"
        )

    def test_equivalent_urls_share_id(self, hasher):
        """Test URLs with the same canonical form share an ID."""
        assert hasher.identify("https://example.com/page") == hasher.identify(
            "http://www.example.com/page/?x=1"
        )
        assert hasher.identify("https://example.com/a") == hasher.identify(
            "HTTP://WWW.EXAMPLE.COM/a#frag"
        )

    def test_https_port_on_http_url_shares_id(self, hasher):
        """Test an explicit :443 on an http URL does not change the ID."""
        assert hasher.identify("http://example.com:443/a") == hasher.identify(
            "https://example.com/a"
        )

    def test_different_pages_differ(self, hasher):
        """Test different pages get different IDs."""
        assert hasher.identify("https://example.com/page1") != hasher.identify(
            "https://example.com/page2"
        )

    def test_path_case_matters(self, hasher):
        """Test the path is case-sensitive."""
        assert hasher.identify("https://example.com/Page") != hasher.identify(
            "https://example.com/page"
        )

    def test_hash_canonical(self, hasher):
        canonical = "https://example.com/page"
        assert hasher.hash_canonical(canonical) == hasher.identify(canonical)

    def test_identify_invalid_url(self, hasher):
        """Test unparseable URLs raise InvalidURL."""
        with pytest.raises(InvalidURL):
            hasher.identify("not a url")

    def test_resolve_id_passes_ids_through(self, hasher):
        """Test an existing document ID is returned unchanged."""
        document_id = "a94a8fe5ccb19ba61c4c0873d391e987982fbbd3"
        assert hasher.resolve_id(document_id) == document_id

    def test_resolve_id_keeps_case(self, hasher):
        """Test uppercase hex IDs are passed through as given."""
        assert hasher.resolve_id("A94A8FE5CCB19BA6") == "A94A8FE5CCB19BA6"

    def test_resolve_id_does_not_double_hash(self, hasher):
        """Test resolving a computed ID gives the same ID."""
        document_id = hasher.identify("https://example.com/page")
        assert hasher.resolve_id(document_id) == document_id
        assert hasher.resolve_id(hasher.resolve_id(document_id)) == document_id

    def test_resolve_id_hashes_urls(self, hasher):
        """Test URLs are resolved through identify()."""
        url = "https://www.example.com/item/42/?ref=home"
        assert hasher.resolve_id(url) == hasher.identify(url)

    def test_resolve_id_invalid_url(self, hasher):
        """Test a non-hex, unparseable value raises InvalidURL."""
        with pytest.raises(InvalidURL):
            hasher.resolve_id("not a url")

    def test_resolve_id_empty(self, hasher):
        """Test the empty string is not an ID and not a URL."""
        with pytest.raises(InvalidURL):
            hasher.resolve_id("")

    def test_hex_only_value_is_treated_as_id(self, hasher):
        """Test a value made of hex digits is never hashed, even if meant as a URL."""
        assert hasher.resolve_id("deadbeef") == "deadbeef"

    def test_resolve_tagged_reference(self, hasher):
        url_ref = DocumentRef(kind="url", value="https://example.com/page")
        id_ref = DocumentRef(kind="id", value="abc123")

        assert hasher.resolve(url_ref) == hasher.identify("https://example.com/page")
        assert hasher.resolve(id_ref) == "abc123"


class TestClassify:
    """Test URL-or-ID classification."""

    @pytest.mark.parametrize(
        "value",
        ["a94a8fe5ccb19ba61c4c0873d391e987982fbbd3", "ABCDEF", "0", "123456"],
    )
    def test_hex_values_are_ids(self, value):
        ref = classify(value)
        assert ref.kind == "id"
        assert ref.is_id
        assert ref.value == value

    @pytest.mark.parametrize(
        "value",
        ["https://example.com/page", "example.com", "", "a94a8fe5 ", "xyz"],
    )
    def test_other_values_are_urls(self, value):
        ref = classify(value)
        assert ref.kind == "url"
        assert not ref.is_id

    def test_looks_like_document_id(self):
        assert looks_like_document_id("a94a8fe5ccb19ba61c4c0873d391e987982fbbd3")
        assert not looks_like_document_id("")
        assert not looks_like_document_id("g123")


class TestModuleFunctions:
    """Test the shared-instance helpers."""

    def test_identify(self):
        assert identify("https://example.com/page") == identify(
            "http://www.example.com/page/?x=1"
        )

    def test_resolve_id(self):
        document_id = "a94a8fe5ccb19ba61c4c0873d391e987982fbbd3"
        assert resolve_id(document_id) == document_id
        assert resolve_id("https://example.com/page") == identify("https://example.com/page")
