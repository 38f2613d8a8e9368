"""
Sales pipeline / CRM signals.
"""

from typing import Any, Dict, List

from modules.intelligence.collectors.base import BaseCollector, TimeWindows
from modules.intelligence.core.models import Domain, EntityRef, PipelineSignals
from modules.intelligence.store.base import Condition
from shared.utils.helpers import calculate_percentage

HOT_STAGES = ("proposal", "negotiation")
TERMINAL_STAGES = ("won", "lost")

MAX_ENTITY_REFS = 5


def _prospect_refs(rows: List[Dict[str, Any]]) -> tuple:
    return tuple(
        EntityRef(type="prospect", id=str(row["id"]), name=row.get("name") or "Unnamed prospect")
        for row in rows
    )


class PipelineCollector(BaseCollector):
    """Lead counts, hot/stale prospects, conversion, and contact engagement."""

    domain = Domain.CRM
    neutral = PipelineSignals

    async def _collect(self, tenant_id: str, windows: TimeWindows) -> PipelineSignals:
        store = self.store

        hot = [Condition("stage", "in", HOT_STAGES)]
        stale = [
            Condition("updated_at", "lte", windows.stale_cutoff),
            Condition("stage", "not_in", TERMINAL_STAGES),
        ]

        total_leads = await store.count("prospects", tenant_id)
        pipeline_value = await store.total("prospects", "estimated_value", tenant_id)
        avg_deal_size = await store.average("prospects", "estimated_value", tenant_id)

        new_leads = await store.count("prospects", tenant_id, [
            Condition("created_at", "gte", windows.week_ago),
        ])

        hot_leads = await store.count("prospects", tenant_id, hot)
        hot_value = await store.total("prospects", "estimated_value", tenant_id, hot)
        hot_rows = await store.fetch(
            "prospects", ["id", "name"], tenant_id, hot,
            order_by="estimated_value", descending=True, limit=MAX_ENTITY_REFS,
        )

        stale_leads = await store.count("prospects", tenant_id, stale)
        stale_value = await store.total("prospects", "estimated_value", tenant_id, stale)
        stale_rows = await store.fetch(
            "prospects", ["id", "name"], tenant_id, stale,
            order_by="updated_at", limit=MAX_ENTITY_REFS,
        )

        # Conversion: won / closed this calendar month
        this_month = Condition("updated_at", "gte", windows.month_start)
        won = await store.count("prospects", tenant_id, [Condition("stage", "eq", "won"), this_month])
        closed = await store.count("prospects", tenant_id, [
            Condition("stage", "in", TERMINAL_STAGES),
            this_month,
        ])

        total_contacts = await store.count("contacts", tenant_id)
        engaged_contacts = await store.count("contacts", tenant_id, [
            Condition("updated_at", "gte", windows.week_ago),
        ])

        return PipelineSignals(
            total_leads=total_leads,
            new_leads_this_week=new_leads,
            hot_leads=hot_leads,
            hot_pipeline_value=hot_value,
            stale_leads=stale_leads,
            stale_pipeline_value=stale_value,
            pipeline_value=pipeline_value,
            avg_deal_size=avg_deal_size,
            conversion_rate=calculate_percentage(won, closed),
            total_contacts=total_contacts,
            contact_engagement=calculate_percentage(engaged_contacts, total_contacts),
            hot_prospects=_prospect_refs(hot_rows),
            stale_prospects=_prospect_refs(stale_rows),
        )
