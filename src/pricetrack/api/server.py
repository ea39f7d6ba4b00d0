"""
FastAPI server exposing URL identity and domain rule lookups.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.responses import JSONResponse

from pricetrack.api.links import url_for
from pricetrack.api.models import (
    CheckResponse,
    DomainRule,
    DomainsResponse,
    HealthResponse,
    NormalizeResponse,
    ResolveResponse,
)
from pricetrack.api.runtime import get_runtime, init_runtime
from pricetrack.api.security import validate_token
from pricetrack.config import get_config
from pricetrack.errors import InvalidURL, RuleSourceError
from pricetrack.identity import classify
from pricetrack.rules import DomainRuleTable

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    Validates config and loads domain rules on startup. Either failing stops
    the server before it accepts requests.
    """
    config = get_config()
    logging.getLogger().setLevel(config.log_level.upper())

    logger.info("Starting up: loading domain rules...")
    init_runtime(config)
    logger.info("Domain rules loaded successfully")

    yield

    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Pricetrack API",
    description="URL canonicalization, document IDs and supported-domain rules",
    version="0.1.0",
    lifespan=lifespan,
)


def _domains_response(table: DomainRuleTable) -> DomainsResponse:
    domains = [DomainRule(**table.rules[hostname].model_dump()) for hostname in table]
    return DomainsResponse(count=len(domains), domains=domains)


@app.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Health check endpoint."""
    try:
        runtime = get_runtime()
        return HealthResponse(
            status="ok",
            rules=len(runtime.rules),
            hosting_url=runtime.config.service.hosting_url,
        )
    except Exception as e:
        logger.error(f"Error in root: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/v1/normalize", response_model=NormalizeResponse)
async def normalize_url(
    url: str = Query(..., min_length=1, description="URL to canonicalize"),
) -> NormalizeResponse:
    """
    Canonicalize a URL and compute its document ID.

    Raises:
        400: If the URL cannot be parsed
    """
    try:
        runtime = get_runtime()
        canonical = runtime.normalizer.normalize(url)
        canonical_url = canonical.to_url()
        return NormalizeResponse(
            url=url,
            canonical_url=canonical_url,
            hostname=canonical.host,
            domain=canonical.domain,
            document_id=runtime.hasher.hash_canonical(canonical_url),
            supported=runtime.resolver.is_supported(url),
            color=runtime.rules.color_of(canonical.host),
            link=url_for(runtime.config.service, "v1/normalize", {"url": canonical_url}),
        )
    except InvalidURL as e:
        logger.warning(f"Normalize failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error in normalize_url: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/v1/resolve", response_model=ResolveResponse)
async def resolve_document_id(
    value: str = Query(..., min_length=1, description="URL or document ID"),
) -> ResolveResponse:
    """
    Resolve a URL or an existing document ID to a document ID.

    Raises:
        400: If the value is read as a URL and cannot be parsed
    """
    try:
        runtime = get_runtime()
        ref = classify(value)
        document_id = runtime.hasher.resolve(ref)
        return ResolveResponse(value=value, kind=ref.kind, document_id=document_id)
    except InvalidURL as e:
        logger.warning(f"Resolve failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error in resolve_document_id: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/v1/check", response_model=CheckResponse)
async def check_url(
    url: str = Query(..., description="URL to check against the domain rules"),
) -> CheckResponse:
    """Admission check; unparseable URLs are reported as unsupported."""
    try:
        resolver = get_runtime().resolver
        return CheckResponse(
            url=url,
            hostname=resolver.hostname_of(url),
            supported=resolver.is_supported(url),
        )
    except Exception as e:
        logger.error(f"Error in check_url: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/v1/domains", response_model=DomainsResponse)
async def list_domains() -> DomainsResponse:
    """List every supported domain rule, sorted by hostname."""
    try:
        return _domains_response(get_runtime().rules)
    except Exception as e:
        logger.error(f"Error in list_domains: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/v1/domains/{hostname}", response_model=DomainRule)
async def get_domain(hostname: str) -> DomainRule:
    """
    Get the rule for one hostname (exact match).

    Raises:
        404: If the hostname has no rule
    """
    try:
        entry = get_runtime().rules.get(hostname)
    except Exception as e:
        logger.error(f"Error in get_domain: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if entry is None:
        logger.warning(f"Domain lookup failed: {hostname}")
        raise HTTPException(status_code=404, detail=f"Unsupported domain: {hostname}")
    return DomainRule(**entry.model_dump())


@app.post("/v1/admin/rules/reload", response_model=DomainsResponse)
async def reload_rules(
    x_admin_token: str | None = Header(None, description="Admin token"),
) -> DomainsResponse:
    """
    Re-read the domain rules source and replace the table.

    Raises:
        401: If the admin token is missing or wrong
        500: If the rules source cannot be loaded (current table is kept)
    """
    try:
        runtime = get_runtime()
        authorized = validate_token(x_admin_token, runtime.config.service.admin_token)
    except Exception as e:
        logger.error(f"Error in reload_rules: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if not authorized:
        logger.warning("Rejected rules reload: invalid admin token")
        raise HTTPException(status_code=401, detail="Invalid admin token")

    try:
        return _domains_response(runtime.reload_rules())
    except RuleSourceError as e:
        logger.error(f"Rules reload failed, keeping current table: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Error in reload_rules: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler."""
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def main():
    """Run the server (for development)."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        app,
        host=config.service.host,
        port=config.service.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
