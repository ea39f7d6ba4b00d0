"""
Domain-to-parser dispatch.

Loads the supported-domain rule table and gates URLs against it.
"""

from .resolver import DomainResolver
from .table import DomainRuleTable, RuleEntry, load_rules

__all__ = [
    "DomainRuleTable",
    "RuleEntry",
    "load_rules",
    "DomainResolver",
]
