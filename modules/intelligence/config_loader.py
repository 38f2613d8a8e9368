"""
Intelligence Configuration Loader.

Loads engine configuration (cache TTL, insight caps, rule thresholds, health
weights) from config/intelligence/default.yaml, with optional per-tenant
overrides in config/intelligence/tenants/<tenant_id>.yaml. Tenant files are
deep-merged over the defaults, so an override only needs the keys it changes.
"""

import re
import yaml
from typing import Dict, Any, List, Optional
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from modules.intelligence.core.exceptions import ConfigurationException
from shared.utils.config import settings
from shared.utils.helpers import deep_merge
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

_TENANT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class RuleThresholds(BaseModel):
    """Numeric thresholds used by collectors, rules, and the health scorer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Time windows (days)
    recent_window_days: int = Field(7, ge=1)
    stale_after_days: int = Field(14, ge=1)
    recent_invoice_days: int = Field(30, ge=1)

    # Pipeline
    stale_leads_min: int = 3
    stale_value_high: float = 10000.0
    replenishment_min_leads: int = 5
    leads_per_campaign_min: float = 2.0
    engagement_open_rate: float = 20.0
    engagement_max_new_leads: int = 2

    # Finance
    overdue_immediate_amount: float = 5000.0
    overdue_high_priority_amount: float = 10000.0
    cash_flow_impact_pct: float = 20.0
    due_soon_count: int = 3
    due_soon_amount: float = 10000.0
    growth_pct: float = 10.0
    pipeline_revenue_multiple: float = 2.0

    # Operations
    overdue_tasks_min: int = 3
    busy_day_events: int = 5
    agent_min_executions: int = 5
    agent_failure_rate_pct: float = 20.0
    automation_completion_rate: float = 70.0
    automation_opportunity_leads: int = 10

    # Marketing
    attention_open_rate: float = 15.0
    underperform_open_rate: float = 15.0
    underperform_min_sent: int = 50
    outperform_open_rate: float = 30.0
    outperform_min_sent: int = 20

    # Cross-domain
    revenue_gap_hot_leads: int = 3
    revenue_gap_invoice_ratio: float = 0.5

    # Health risks
    stale_risk_count: int = 5
    overdue_tasks_risk: int = 3


class HealthWeights(BaseModel):
    """Dimension weights and trend/strength cutoffs for the health scorer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    revenue: float = Field(0.25, ge=0.0, le=1.0)
    pipeline: float = Field(0.25, ge=0.0, le=1.0)
    operations: float = Field(0.20, ge=0.0, le=1.0)
    marketing: float = Field(0.15, ge=0.0, le=1.0)
    cash_flow: float = Field(0.15, ge=0.0, le=1.0)

    strength_score: float = 70.0
    risk_score: float = 40.0
    trend_growth_pct: float = 5.0
    trend_new_leads: int = 2

    @model_validator(mode="after")
    def check_weights_sum(self) -> "HealthWeights":
        total = self.revenue + self.pipeline + self.operations + self.marketing + self.cash_flow
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"health weights must sum to 1.0, got {total:.3f}")
        return self


class IntelligenceConfig(BaseModel):
    """Engine configuration passed to collectors, rule engine, scorer, and cache."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_ttl_seconds: int = Field(900, ge=900, le=1800)
    max_insights: int = Field(10, ge=1)
    min_confidence: float = Field(0.6, ge=0.0, le=1.0)
    collector_timeout_seconds: float = Field(10.0, gt=0)
    disabled_rules: List[str] = Field(default_factory=list)
    thresholds: RuleThresholds = Field(default_factory=RuleThresholds)
    weights: HealthWeights = Field(default_factory=HealthWeights)


class IntelligenceConfigLoader:
    """
    Loads intelligence engine configuration.

    Layout:
    - default.yaml: base configuration for every tenant
    - tenants/<tenant_id>.yaml: optional per-tenant overrides
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory holding default.yaml and tenants/.
                        Defaults to INSIGHTS_CONFIG_PATH or config/intelligence/
        """
        if config_dir is None:
            if settings.INSIGHTS_CONFIG_PATH:
                config_dir = Path(settings.INSIGHTS_CONFIG_PATH)
            else:
                project_root = Path(__file__).parent.parent.parent
                config_dir = project_root / "config" / "intelligence"

        self.config_dir = Path(config_dir)

        # Cached raw YAML
        self._defaults: Optional[Dict[str, Any]] = None
        self._tenant_overrides: Dict[str, Dict[str, Any]] = {}

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse intelligence config {path}: {e}")
            raise ConfigurationException(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationException(f"Config file {path} must contain a mapping")
        return data

    def load_defaults(self) -> Dict[str, Any]:
        """
        Load default configuration.

        Returns:
            Raw default config dictionary (empty if default.yaml is missing)
        """
        if self._defaults is not None:
            return self._defaults

        config_path = self.config_dir / "default.yaml"

        if not config_path.exists():
            logger.warning(
                f"Intelligence config not found: {config_path}. Using built-in defaults."
            )
            self._defaults = {}
            return self._defaults

        self._defaults = self._read_yaml(config_path)
        logger.info(f"Loaded intelligence config from: {config_path}")
        return self._defaults

    def load_tenant_overrides(self, tenant_id: str) -> Dict[str, Any]:
        """
        Load per-tenant overrides (optional).

        Tenant ids are opaque; an id that cannot name a file simply has no
        overrides.

        Returns:
            Override dictionary or empty dict if the tenant has none
        """
        if tenant_id in self._tenant_overrides:
            return self._tenant_overrides[tenant_id]

        if not _TENANT_ID_PATTERN.match(tenant_id):
            logger.debug(f"Tenant id {tenant_id!r} cannot name an override file; using defaults")
            self._tenant_overrides[tenant_id] = {}
            return {}

        config_path = self.config_dir / "tenants" / f"{tenant_id}.yaml"

        if not config_path.exists():
            logger.debug(f"No tenant overrides for {tenant_id}")
            overrides: Dict[str, Any] = {}
        else:
            overrides = self._read_yaml(config_path)
            logger.info(f"Loaded intelligence overrides for tenant: {tenant_id}")

        self._tenant_overrides[tenant_id] = overrides
        return overrides

    def get_config(self, tenant_id: Optional[str] = None) -> IntelligenceConfig:
        """
        Build the effective configuration for a tenant.

        Args:
            tenant_id: Tenant to apply overrides for (None = defaults only)

        Raises:
            ConfigurationException: If YAML is malformed or values are invalid
        """
        raw = self.load_defaults()
        if tenant_id:
            raw = deep_merge(raw, self.load_tenant_overrides(tenant_id))

        try:
            return IntelligenceConfig.model_validate(raw)
        except ValidationError as e:
            source = f"tenant {tenant_id}" if tenant_id else "defaults"
            logger.error(f"Invalid intelligence config ({source}): {e}")
            raise ConfigurationException(f"Invalid intelligence config ({source}): {e}") from e

    def reload(self):
        """Clear cached configs and force reload."""
        self._defaults = None
        self._tenant_overrides = {}
