"""
API response models.

Defines Pydantic models for the HTTP surface.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /."""

    status: str = Field("ok", description="Service status")
    rules: int = Field(..., description="Number of loaded domain rules")
    hosting_url: str = Field(..., description="Root URL of the web frontend")


class NormalizeResponse(BaseModel):
    """Response for GET /v1/normalize."""

    url: str = Field(..., description="URL as supplied")
    canonical_url: str = Field(..., description="Canonical URL")
    hostname: str = Field(..., description="Canonical hostname")
    domain: str = Field(..., description="Registrable domain (eTLD+1)")
    document_id: str = Field(..., description="SHA-1 hex of the canonical URL")
    supported: bool = Field(..., description="Whether a domain rule applies")
    color: str | None = Field(None, description="Display color of the domain")
    link: str = Field(..., description="Link to this lookup")


class ResolveResponse(BaseModel):
    """Response for GET /v1/resolve."""

    value: str = Field(..., description="Value as supplied")
    kind: Literal["url", "id"] = Field(..., description="How the value was read")
    document_id: str = Field(..., description="Resolved document ID")


class CheckResponse(BaseModel):
    """Response for GET /v1/check."""

    url: str = Field(..., description="URL as supplied")
    hostname: str = Field(..., description="Canonical hostname, empty if unparseable")
    supported: bool = Field(..., description="Whether the URL passes the gate")


class DomainRule(BaseModel):
    """A single domain rule."""

    hostname: str = Field(..., description="Canonical hostname")
    parser: str = Field(..., description="Parser ruleset identifier")
    color: str | None = Field(None, description="Display color")
    options: dict[str, Any] = Field(
        default_factory=dict, description="Site-specific parser settings"
    )


class DomainsResponse(BaseModel):
    """Response for GET /v1/domains and POST /v1/admin/rules/reload."""

    count: int = Field(..., description="Number of rules")
    domains: list[DomainRule] = Field(
        default_factory=list, description="Rules sorted by hostname"
    )
