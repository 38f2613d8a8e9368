"""
Registry pattern implementation for insight rules.

Rules self-register with the @insight_rule decorator. Registration order is
evaluation order, so ranking ties resolve the same way on every run.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from modules.intelligence.config_loader import RuleThresholds
from modules.intelligence.core.models import Domain, Insight, SignalSnapshot
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

RuleFunc = Callable[[SignalSnapshot, RuleThresholds], List[Insight]]


@dataclass(frozen=True)
class InsightRule:
    """One detection rule: a pure function from snapshot to insights."""
    rule_id: str
    domains: Tuple[Domain, ...]
    evaluate: RuleFunc


class RuleRegistry:
    """
    Ordered collection of insight rules.

    Example:
        registry = RuleRegistry()
        registry.register(InsightRule("my_rule", (Domain.CRM,), my_func))
        [rule.rule_id for rule in registry.rules()]  # ["my_rule"]
    """

    def __init__(self):
        self._rules: Dict[str, InsightRule] = {}

    def register(self, rule: InsightRule) -> None:
        """
        Register a rule.

        Re-registering a rule_id replaces the rule but keeps its position.
        """
        if rule.rule_id in self._rules:
            logger.warning(f"Insight rule '{rule.rule_id}' already registered, overwriting")

        self._rules[rule.rule_id] = rule
        logger.debug(f"Registered insight rule: {rule.rule_id}")

    def unregister(self, rule_id: str) -> None:
        self._rules.pop(rule_id, None)

    def get(self, rule_id: str) -> InsightRule:
        if rule_id not in self._rules:
            available = ", ".join(self._rules.keys())
            raise KeyError(f"Insight rule '{rule_id}' not registered. Available: {available}")
        return self._rules[rule_id]

    def rules(self, disabled: Iterable[str] = ()) -> List[InsightRule]:
        """Rules in registration order, skipping disabled rule_ids."""
        skip = set(disabled)
        return [rule for rule_id, rule in self._rules.items() if rule_id not in skip]

    def list_rules(self) -> List[str]:
        return list(self._rules.keys())

    def is_registered(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)


# Rules shipped with the engine register here
default_registry = RuleRegistry()


def insight_rule(rule_id: str, domains: Iterable[Domain], registry: Optional[RuleRegistry] = None):
    """
    Decorator to register a rule function.

    Example:
        @insight_rule("task_backlog", [Domain.OPERATIONS])
        def task_backlog(snapshot, thresholds):
            ...
    """
    target = registry if registry is not None else default_registry

    def decorator(func: RuleFunc) -> RuleFunc:
        target.register(InsightRule(rule_id=rule_id, domains=tuple(domains), evaluate=func))
        return func

    return decorator


def make_insight(rule_id: str, snapshot: SignalSnapshot, domains: Iterable[Domain], **fields) -> Insight:
    """
    Build an insight with the fields every rule shares.

    The id is stable per rule and tenant, and detected_at is the snapshot's
    capture time, so equal snapshots produce equal insights.
    """
    return Insight(
        id=f"{rule_id}:{snapshot.tenant_id}",
        rule_id=rule_id,
        domains=tuple(domains),
        detected_at=snapshot.captured_at,
        **fields,
    )
