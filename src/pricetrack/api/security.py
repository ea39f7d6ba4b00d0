"""
Admin token validation.
"""

import hmac
from typing import Optional

from pydantic import SecretStr


def validate_token(token: Optional[str], admin_token: SecretStr) -> bool:
    """
    Compare a caller-supplied token with the configured admin token.

    An empty or missing token never validates. The comparison is constant-time.
    """
    expected = admin_token.get_secret_value()
    if not token or not expected:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))
