"""
Links to service endpoints.

Builds absolute URLs under the configured functions base URL, e.g.
``url_for("v1/normalize", {"url": "https://tiki.vn/p/1"})`` ->
``http://localhost:5001/price-tracker/us-central1/v1/normalize?url=https%3A%2F%2Ftiki.vn%2Fp%2F1``.
"""

from typing import Mapping, Optional
from urllib.parse import urlencode

from pricetrack.config import ServiceConfig


def functions_base_url(config: ServiceConfig, region: Optional[str] = None) -> str:
    """Base URL for ``region``, falling back to the default functions URL."""
    if region and region in config.regional_functions_urls:
        return config.regional_functions_urls[region]
    return config.functions_url


def url_for(
    config: ServiceConfig,
    path: str,
    params: Optional[Mapping[str, object]] = None,
    region: Optional[str] = None,
) -> str:
    """
    Build an absolute link to a service endpoint.

    Args:
        config: Service configuration with the base URLs
        path: Endpoint path relative to the base URL
        params: Query parameters; a ``region`` entry selects the regional base
            URL when ``region`` is not given
        region: Region whose base URL to use

    Returns:
        Absolute URL with percent-encoded query string
    """
    params = dict(params or {})
    if region is None and params.get("region") is not None:
        region = str(params["region"])

    link = f"{functions_base_url(config, region)}/{path.lstrip('/')}"
    if params:
        link = f"{link}?{urlencode(params)}"
    return link
