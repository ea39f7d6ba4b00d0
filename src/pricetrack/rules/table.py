"""
Domain rule table.

Maps each supported hostname to the parser ruleset that scrapes it and the
color it is displayed with. The table is loaded once at startup from a rules
source:
- a directory of ``<hostname>.json`` files, one rule per file
- or a single JSON file mapping hostname -> rule

and is read-only afterwards.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from pricetrack.errors import RuleSourceError
from pricetrack.identity.url_normalizer import URLNormalizer, get_normalizer

logger = logging.getLogger(__name__)

# Keys of a rule object that are not passed through as parser options
_RESERVED_KEYS = ("domain", "parser", "color")


class RuleEntry(BaseModel):
    """Parsing strategy and display attributes for one supported hostname."""

    hostname: str = Field(..., min_length=1, description="Canonical hostname")
    parser: str = Field(..., min_length=1, description="Parser ruleset identifier")
    color: Optional[str] = Field(
        None,
        pattern=r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$",
        description="Display color as #rgb or #rrggbb",
    )
    options: dict[str, Any] = Field(
        default_factory=dict, description="Site-specific parser settings"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_rule(cls, hostname: str, rule: Mapping[str, Any]) -> RuleEntry:
        """
        Build an entry from a raw rule object.

        Args:
            hostname: Hostname the rule applies to
            rule: Rule object as read from the rules source

        Returns:
            RuleEntry; ``parser`` defaults to the hostname

        Raises:
            ValueError: If the rule is not an object or fails validation
        """
        if not isinstance(rule, Mapping):
            raise ValueError(f"rule for {hostname!r} must be an object")

        return cls(
            hostname=hostname,
            parser=rule.get("parser") or hostname,
            color=rule.get("color"),
            options={k: v for k, v in rule.items() if k not in _RESERVED_KEYS},
        )


class DomainRuleTable:
    """
    Immutable hostname -> RuleEntry mapping.

    Usage:
        table = load_rules(Path("config/rules"))
        "tiki.vn" in table            # True
        table.color_of("tiki.vn")     # "#189eff"
        table.supported_hosts()       # frozenset({...})
    """

    def __init__(self, entries: Iterable[RuleEntry], source: Path | str | None = None):
        """
        Build the table.

        Args:
            entries: Rule entries with canonical hostnames
            source: Where the entries were loaded from (informational)

        Raises:
            ValueError: If two entries share a hostname
        """
        rules: dict[str, RuleEntry] = {}
        for entry in entries:
            if entry.hostname in rules:
                raise ValueError(f"duplicate rule for hostname {entry.hostname!r}")
            rules[entry.hostname] = entry

        self.source = source
        self._rules = MappingProxyType(rules)
        self._hosts = frozenset(rules)

    @classmethod
    def from_mapping(
        cls,
        rules: Mapping[str, Mapping[str, Any]],
        normalizer: URLNormalizer | None = None,
        source: Path | str | None = None,
    ) -> DomainRuleTable:
        """
        Build a table from a hostname -> rule object mapping.

        Hostnames are canonicalized the same way URL hosts are, so a key
        written as ``www.Shop.com`` matches URLs on ``shop.com``.
        """
        normalizer = normalizer or get_normalizer()
        entries = []
        for hostname, rule in rules.items():
            if not isinstance(hostname, str):
                raise ValueError(f"hostname must be a string, got {hostname!r}")
            entries.append(RuleEntry.from_rule(normalizer.canonical_host(hostname), rule))
        return cls(entries, source=source)

    @property
    def rules(self) -> Mapping[str, RuleEntry]:
        """Read-only view of the hostname -> RuleEntry mapping."""
        return self._rules

    def supported_hosts(self) -> frozenset[str]:
        """Set of hostnames that have a rule."""
        return self._hosts

    def get(self, hostname: str) -> Optional[RuleEntry]:
        """Rule for ``hostname`` (exact match), or None."""
        return self._rules.get(hostname)

    def color_of(self, hostname: str) -> Optional[str]:
        """Display color for ``hostname``, or None if unknown or unset."""
        entry = self._rules.get(hostname)
        return entry.color if entry is not None else None

    def parser_of(self, hostname: str) -> Optional[str]:
        """Parser ruleset identifier for ``hostname``, or None if unknown."""
        entry = self._rules.get(hostname)
        return entry.parser if entry is not None else None

    def colors(self) -> dict[str, str]:
        """Hostname -> color for every rule that defines a color."""
        return {
            hostname: entry.color
            for hostname, entry in sorted(self._rules.items())
            if entry.color is not None
        }

    def __contains__(self, hostname: object) -> bool:
        return hostname in self._hosts

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._rules))


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RuleSourceError(path, str(e)) from e


def _read_rule_dir(directory: Path) -> dict[str, Any]:
    """Read one rule per ``*.json`` file; the hostname is ``domain`` or the file stem."""
    rules: dict[str, Any] = {}
    for path in sorted(directory.glob("*.json")):
        rule = _read_json(path)
        if not isinstance(rule, dict):
            raise RuleSourceError(path, "rule file must contain a JSON object")

        hostname = rule.get("domain") or path.stem
        if hostname in rules:
            raise RuleSourceError(path, f"duplicate rule for hostname {hostname!r}")

        logger.debug("Read rule for %s from %s", hostname, path.name)
        rules[hostname] = rule
    return rules


def load_rules(
    source: Path | str, normalizer: URLNormalizer | None = None
) -> DomainRuleTable:
    """
    Load the domain rule table from a directory or JSON file.

    This is a startup step: a missing or malformed source means the service
    cannot admit any URL, so every problem is raised as RuleSourceError.

    Args:
        source: Rules directory or JSON mapping file
        normalizer: URLNormalizer used to canonicalize hostnames

    Returns:
        Loaded DomainRuleTable

    Raises:
        RuleSourceError: If the source is missing, malformed, or empty
    """
    source = Path(source)
    logger.info(f"Loading domain rules from {source}")

    if source.is_dir():
        raw_rules = _read_rule_dir(source)
    elif source.is_file():
        raw_rules = _read_json(source)
        if not isinstance(raw_rules, dict):
            raise RuleSourceError(source, "rules file must map hostnames to rules")
    else:
        raise RuleSourceError(source, "no such file or directory")

    if not raw_rules:
        raise RuleSourceError(source, "no rules defined")

    try:
        table = DomainRuleTable.from_mapping(raw_rules, normalizer=normalizer, source=source)
    except ValueError as e:
        raise RuleSourceError(source, str(e)) from e

    logger.info(f"Loaded {len(table)} domain rules: {', '.join(table)}")
    return table
