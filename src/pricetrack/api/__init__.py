"""
API serving layer.

Exposes URL identity and domain rule lookups over HTTP.
"""

from pricetrack.api.links import url_for
from pricetrack.api.models import (
    CheckResponse,
    DomainRule,
    DomainsResponse,
    HealthResponse,
    NormalizeResponse,
    ResolveResponse,
)
from pricetrack.api.runtime import Runtime, get_runtime, init_runtime, reset_runtime
from pricetrack.api.security import validate_token
from pricetrack.api.server import app

__all__ = [
    "Runtime",
    "get_runtime",
    "init_runtime",
    "reset_runtime",
    "CheckResponse",
    "DomainRule",
    "DomainsResponse",
    "HealthResponse",
    "NormalizeResponse",
    "ResolveResponse",
    "url_for",
    "validate_token",
    "app",
]
