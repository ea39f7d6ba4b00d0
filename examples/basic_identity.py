"""
Basic identity example.

Demonstrates URL canonicalization, document IDs, and the supported-domain gate.

Run from the repository root:
    python examples/basic_identity.py
"""

from pathlib import Path

from pricetrack.identity import IdentityHasher, URLNormalizer
from pricetrack.rules import DomainResolver, load_rules


def main():
    """Run basic identity example."""
    print("=" * 60)
    print("Pricetrack: Basic Identity Example")
    print("=" * 60)

    normalizer = URLNormalizer()
    hasher = IdentityHasher(normalizer)

    # Example 1: Canonicalize a single URL
    print("\n1. Single URL Normalization")
    print("-" * 60)

    raw_url = "HTTP://WWW.Tiki.vn/dien-thoai-p123.html/?spid=456&utm_source=mail#reviews"
    print(f"Raw URL: {raw_url}")

    canonical = normalizer.normalize(raw_url)
    print(f"\nCanonical URL: {canonical.to_url()}")
    print(f"Host: {canonical.host}")
    print(f"Domain (eTLD+1): {canonical.domain}")
    print(f"Document ID: {hasher.identify(raw_url)}")

    # Example 2: Variants of the same page share one ID
    print("\n\n2. Equivalent URLs")
    print("-" * 60)

    variants = [
        "https://tiki.vn/dien-thoai-p123.html",
        "http://www.tiki.vn/dien-thoai-p123.html/",
        "tiki.vn/dien-thoai-p123.html?ref=home",
    ]
    for url in variants:
        print(f"{hasher.identify(url)}  {url}")

    # Example 3: Pass-through of existing IDs
    print("\n\n3. Resolving URL or ID")
    print("-" * 60)

    document_id = hasher.identify(variants[0])
    print(f"resolve_id(url) = {hasher.resolve_id(variants[0])}")
    print(f"resolve_id(id)  = {hasher.resolve_id(document_id)}")

    # Example 4: Admission gate
    print("\n\n4. Supported Domains")
    print("-" * 60)

    table = load_rules(Path("config/rules"))
    resolver = DomainResolver(table, normalizer)
    for url in [raw_url, "https://www.amazon.com/dp/B000000000", "not a url"]:
        rule = resolver.rule_for(url)
        if rule is None:
            print(f"unsupported  {url}")
        else:
            print(f"{rule.parser:<10} {rule.color}  {url}")

    print("\n" + "=" * 60)
    print("Example completed!")
    print("=" * 60)


if __name__ == "__main__":
    main()
