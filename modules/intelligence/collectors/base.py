"""
Base collector and collector result types.

A collector turns aggregate store queries into one domain's signal record.
Failures never escape a collector: they are logged once and replaced by the
domain's neutral record, with the error kept on the result.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Type

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from modules.intelligence.config_loader import RuleThresholds
from modules.intelligence.core.exceptions import CollectorError
from modules.intelligence.core.models import Domain
from modules.intelligence.store.base import SignalStore
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class TimeWindows:
    """Window boundaries derived from one capture time (naive UTC)."""
    now: datetime
    week_ago: datetime
    week_ahead: datetime
    stale_cutoff: datetime
    recent_invoice_cutoff: datetime
    day_start: datetime
    day_end: datetime
    month_start: datetime
    next_month_start: datetime
    last_month_start: datetime

    @classmethod
    def from_now(cls, now: datetime, thresholds: Optional[RuleThresholds] = None) -> "TimeWindows":
        thresholds = thresholds or RuleThresholds()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month_start = day_start.replace(day=1)
        recent = timedelta(days=thresholds.recent_window_days)

        return cls(
            now=now,
            week_ago=now - recent,
            week_ahead=now + recent,
            stale_cutoff=now - timedelta(days=thresholds.stale_after_days),
            recent_invoice_cutoff=now - timedelta(days=thresholds.recent_invoice_days),
            day_start=day_start,
            day_end=day_start + timedelta(days=1),
            month_start=month_start,
            next_month_start=month_start + relativedelta(months=1),
            last_month_start=month_start - relativedelta(months=1),
        )


@dataclass
class CollectorResult:
    """
    Outcome of one collector run.

    `signals` is always usable: the collected record, or the domain's
    neutral record when `error` is set.
    """
    domain: Domain
    signals: Any
    error: Optional[CollectorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaseCollector(ABC):
    """
    Base class for domain signal collectors.

    Subclasses set `domain` and `neutral` and implement `_collect`.
    """

    domain: Domain
    neutral: Type[BaseModel]

    def __init__(
        self,
        store: SignalStore,
        thresholds: Optional[RuleThresholds] = None,
        timeout_seconds: Optional[float] = None
    ):
        """
        Initialize collector.

        Args:
            store: Signal store to query
            thresholds: Windows and cutoffs (defaults apply when None)
            timeout_seconds: Upper bound for one collection (None = unbounded)
        """
        self.store = store
        self.thresholds = thresholds or RuleThresholds()
        self.timeout_seconds = timeout_seconds

    async def collect(self, tenant_id: str, now: datetime) -> CollectorResult:
        """
        Collect this domain's signals for a tenant.

        Never raises; failures and timeouts yield the neutral record.
        """
        windows = TimeWindows.from_now(now, self.thresholds)

        try:
            if self.timeout_seconds:
                signals = await asyncio.wait_for(
                    self._collect(tenant_id, windows),
                    timeout=self.timeout_seconds,
                )
            else:
                signals = await self._collect(tenant_id, windows)
            return CollectorResult(domain=self.domain, signals=signals)

        except asyncio.TimeoutError as e:
            error = CollectorError(
                self.domain.value, f"timed out after {self.timeout_seconds}s", e
            )
        except Exception as e:
            error = CollectorError(self.domain.value, f"{type(e).__name__}: {e}", e)

        logger.warning(f"Using neutral {self.domain.value} signals for tenant {tenant_id}: {error}")
        return CollectorResult(domain=self.domain, signals=self.neutral(), error=error)

    @abstractmethod
    async def _collect(self, tenant_id: str, windows: TimeWindows) -> BaseModel:
        """Query the store and build the domain's signal record."""
        pass
