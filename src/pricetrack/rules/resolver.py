"""
Domain resolution and the admission gate.

Decides, before any fetch or storage work, whether a URL belongs to a
supported shop. Unparseable input is reported as "no host" / "not supported"
instead of raising.
"""

import logging
from typing import Optional

from pricetrack.errors import InvalidURL
from pricetrack.identity.url_normalizer import URLNormalizer, get_normalizer
from pricetrack.rules.table import DomainRuleTable, RuleEntry

logger = logging.getLogger(__name__)


class DomainResolver:
    """
    Resolve URLs to hostnames and check them against a DomainRuleTable.

    The table reference is replaced as a whole by ``swap_table``; it is never
    mutated, so concurrent readers always see one complete snapshot.
    """

    def __init__(self, table: DomainRuleTable, normalizer: Optional[URLNormalizer] = None):
        """
        Initialize the resolver.

        Args:
            table: Rule table to admit URLs against
            normalizer: URLNormalizer (shared one by default)
        """
        self._table = table
        self.normalizer = normalizer or get_normalizer()

    @property
    def table(self) -> DomainRuleTable:
        return self._table

    def swap_table(self, table: DomainRuleTable) -> DomainRuleTable:
        """Replace the rule table and return the previous one."""
        previous, self._table = self._table, table
        logger.info(f"Rule table replaced: {len(previous)} -> {len(table)} rules")
        return previous

    def hostname_of(self, url: str) -> str:
        """
        Canonical host of ``url``, or "" if it cannot be parsed.

        The host is taken after normalization, so ``www.`` is already
        stripped. An explicit non-default port is not part of the hostname.
        """
        try:
            return self.normalizer.normalize(url).host
        except InvalidURL as e:
            logger.debug(f"No hostname for {url!r}: {e.reason}")
            return ""

    def is_supported(self, url: str) -> bool:
        """True iff the canonical host of ``url`` has a rule."""
        hostname = self.hostname_of(url)
        return bool(hostname) and hostname in self._table.supported_hosts()

    # Name used by the rest of the service
    is_supported_url = is_supported

    def rule_for(self, url: str) -> Optional[RuleEntry]:
        """Rule that applies to ``url``, or None if unsupported or unparseable."""
        hostname = self.hostname_of(url)
        if not hostname:
            return None
        return self._table.get(hostname)
