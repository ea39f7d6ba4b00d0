"""
Service runtime.

Builds the read-only state the service runs on (config, normalizer, hasher,
rule table and resolver) once at startup and hands it to request handlers.
"""

import logging

from pricetrack.config import Config
from pricetrack.identity import IdentityHasher, URLNormalizer
from pricetrack.rules import DomainResolver, DomainRuleTable, load_rules

logger = logging.getLogger(__name__)


class Runtime:
    """
    Container for the startup snapshot.

    Usage:
        runtime = Runtime(config)
        runtime.load()
        runtime.resolver.is_supported("https://tiki.vn/p/123")
    """

    def __init__(self, config: Config, table: DomainRuleTable | None = None):
        """
        Initialize the runtime.

        Args:
            config: Validated configuration
            table: Prebuilt rule table; when omitted ``load()`` reads
                config.rules.source
        """
        self.config = config
        self.normalizer = URLNormalizer()
        self.hasher = IdentityHasher(self.normalizer)
        self._resolver: DomainResolver | None = None

        if table is not None:
            self._resolver = DomainResolver(table, self.normalizer)

        logger.info(f"Runtime initialized with rules source={config.rules.source}")

    def load(self) -> None:
        """
        Load the rule table from the configured source.

        Raises:
            RuleSourceError: If the rules source is missing or malformed
        """
        if self._resolver is not None:
            return
        table = load_rules(self.config.rules.source, self.normalizer)
        self._resolver = DomainResolver(table, self.normalizer)

    def reload_rules(self) -> DomainRuleTable:
        """
        Re-read the rules source and swap the new table in.

        The new table is fully built before it replaces the old one; on
        RuleSourceError the current table stays in place.
        """
        table = load_rules(self.config.rules.source, self.normalizer)
        self.resolver.swap_table(table)
        return table

    @property
    def resolver(self) -> DomainResolver:
        if self._resolver is None:
            raise RuntimeError("Rules not loaded. Call load() first.")
        return self._resolver

    @property
    def rules(self) -> DomainRuleTable:
        return self.resolver.table


# Global runtime instance
_runtime: Runtime | None = None


def get_runtime() -> Runtime:
    """
    Get the global Runtime instance.

    Raises:
        RuntimeError: If runtime not initialized
    """
    global _runtime
    if _runtime is None:
        raise RuntimeError("Runtime not initialized. Call init_runtime() first.")
    return _runtime


def init_runtime(config: Config, table: DomainRuleTable | None = None) -> Runtime:
    """
    Initialize the global Runtime instance.

    Args:
        config: Validated configuration
        table: Optional prebuilt rule table (skips reading the rules source)

    Returns:
        Loaded Runtime instance
    """
    global _runtime
    runtime = Runtime(config, table=table)
    runtime.load()
    _runtime = runtime
    return _runtime


def reset_runtime() -> None:
    """Drop the global runtime (for testing)."""
    global _runtime
    _runtime = None
