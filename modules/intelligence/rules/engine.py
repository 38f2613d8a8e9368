"""
Rule engine: evaluates every enabled insight rule against one snapshot.
"""

from typing import List, Optional

from modules.intelligence.config_loader import IntelligenceConfig
from modules.intelligence.core.exceptions import RuleEvaluationError
from modules.intelligence.core.models import Insight, SignalSnapshot
from modules.intelligence.ranker import rank_insights
from modules.intelligence.rules.registry import InsightRule, RuleRegistry, default_registry
from shared.utils.logger import setup_logger, log_error

logger = setup_logger(__name__)


class RuleEngine:
    """
    Evaluates registered rules against a snapshot.

    A rule that raises (or returns something other than a list of insights)
    is logged and skipped; the remaining rules still run.

    Example:
        engine = RuleEngine(config)
        insights = engine.detect(snapshot)  # ranked, filtered, capped
    """

    def __init__(self, config: Optional[IntelligenceConfig] = None, registry: Optional[RuleRegistry] = None):
        self.config = config or IntelligenceConfig()
        self.registry = registry if registry is not None else default_registry

    def active_rules(self) -> List[InsightRule]:
        return self.registry.rules(disabled=self.config.disabled_rules)

    def _run_rule(self, rule: InsightRule, snapshot: SignalSnapshot) -> List[Insight]:
        try:
            output = rule.evaluate(snapshot, self.config.thresholds)
        except Exception as e:
            raise RuleEvaluationError(f"Rule '{rule.rule_id}' failed: {type(e).__name__}: {e}") from e

        if output is None:
            return []
        if not isinstance(output, list) or not all(isinstance(item, Insight) for item in output):
            raise RuleEvaluationError(f"Rule '{rule.rule_id}' must return a list of Insight")
        return output

    def evaluate(self, snapshot: SignalSnapshot) -> List[Insight]:
        """
        Run every enabled rule.

        Returns:
            Pooled insights in rule-evaluation order (unranked)
        """
        pooled: List[Insight] = []

        for rule in self.active_rules():
            try:
                pooled.extend(self._run_rule(rule, snapshot))
            except RuleEvaluationError as e:
                log_error(logger, e, f"Skipping insight rule for tenant {snapshot.tenant_id}")

        logger.debug(f"Rules produced {len(pooled)} insights for tenant {snapshot.tenant_id}")
        return pooled

    def detect(self, snapshot: SignalSnapshot) -> List[Insight]:
        """Evaluate rules, then filter by confidence, order, and cap."""
        return rank_insights(
            self.evaluate(snapshot),
            min_confidence=self.config.min_confidence,
            max_insights=self.config.max_insights,
        )
