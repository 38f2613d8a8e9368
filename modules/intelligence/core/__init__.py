"""
Core models and exceptions for the intelligence module.
"""

from modules.intelligence.core.exceptions import (
    IntelligenceException,
    CollectorError,
    StoreQueryError,
    CacheBackendError,
    RuleEvaluationError,
    ConfigurationException,
)
from modules.intelligence.core.models import (
    Domain,
    EntityRef,
    FinanceSignals,
    HealthDimensions,
    HealthScore,
    Insight,
    InsightType,
    InsightsResponse,
    IntelligenceResult,
    MarketingSignals,
    Momentum,
    OperationsSignals,
    PipelineSignals,
    SignalSnapshot,
    Trend,
    Urgency,
)

__all__ = [
    "IntelligenceException",
    "CollectorError",
    "StoreQueryError",
    "CacheBackendError",
    "RuleEvaluationError",
    "ConfigurationException",
    "Domain",
    "EntityRef",
    "FinanceSignals",
    "HealthDimensions",
    "HealthScore",
    "Insight",
    "InsightType",
    "InsightsResponse",
    "IntelligenceResult",
    "MarketingSignals",
    "Momentum",
    "OperationsSignals",
    "PipelineSignals",
    "SignalSnapshot",
    "Trend",
    "Urgency",
]
