"""
Domain signal collectors.
"""

from modules.intelligence.collectors.base import BaseCollector, CollectorResult, TimeWindows
from modules.intelligence.collectors.pipeline import PipelineCollector
from modules.intelligence.collectors.marketing import MarketingCollector
from modules.intelligence.collectors.finance import FinanceCollector
from modules.intelligence.collectors.operations import OperationsCollector

__all__ = [
    "BaseCollector",
    "CollectorResult",
    "TimeWindows",
    "PipelineCollector",
    "MarketingCollector",
    "FinanceCollector",
    "OperationsCollector",
]
