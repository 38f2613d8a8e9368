"""
Insight rules.

Importing this package registers the shipped rules with the default
registry. Module import order is rule evaluation order.
"""

from modules.intelligence.rules.registry import (
    InsightRule,
    RuleRegistry,
    default_registry,
    insight_rule,
    make_insight,
)

# Register shipped rules
from modules.intelligence.rules import crm  # noqa: F401
from modules.intelligence.rules import finance  # noqa: F401
from modules.intelligence.rules import operations  # noqa: F401
from modules.intelligence.rules import marketing  # noqa: F401
from modules.intelligence.rules import cross_domain  # noqa: F401

from modules.intelligence.rules.engine import RuleEngine

__all__ = [
    "InsightRule",
    "RuleRegistry",
    "RuleEngine",
    "default_registry",
    "insight_rule",
    "make_insight",
]
