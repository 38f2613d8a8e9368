"""
Business Intelligence Module.

Turns a workspace's operational records into a signal snapshot, a weighted
business health score, and a ranked list of proactive insights.

Quick Start:
    >>> from modules.intelligence import IntelligenceService
    >>> service = IntelligenceService.from_settings()
    >>> response = await service.get_insights("ws-123")
    >>> response.insights[0].title
    'Deals ready to close'

Architecture:
    - Collectors: four domain collectors run concurrently over a SignalStore
    - Rules: registry of independent, toggleable insight rules
    - Health scorer: five weighted dimensions, pure function of the snapshot
    - Cache: read-through per tenant, memory or Redis backend
    - Config: YAML defaults with per-tenant overrides

Components:
    - IntelligenceService: Main service (public API)
    - IntelligenceConfigLoader: Loads engine config
    - RuleEngine: Evaluates insight rules
    - HealthScorer: Scores business health
    - IntelligenceCache: Caches computed results
"""

from modules.intelligence.intelligence_service import IntelligenceService
from modules.intelligence.config_loader import (
    IntelligenceConfig,
    IntelligenceConfigLoader,
    RuleThresholds,
    HealthWeights,
)
from modules.intelligence.rules import RuleEngine, RuleRegistry, insight_rule
from modules.intelligence.health_scorer import HealthScorer
from modules.intelligence.ranker import rank_insights
from modules.intelligence.cache import (
    IntelligenceCache,
    MemoryCacheBackend,
    RedisCacheBackend,
)

__all__ = [
    "IntelligenceService",
    "IntelligenceConfig",
    "IntelligenceConfigLoader",
    "RuleThresholds",
    "HealthWeights",
    "RuleEngine",
    "RuleRegistry",
    "insight_rule",
    "HealthScorer",
    "rank_insights",
    "IntelligenceCache",
    "MemoryCacheBackend",
    "RedisCacheBackend",
]

__version__ = "1.0.0"
