"""
Marketing campaign signals.
"""

from modules.intelligence.collectors.base import BaseCollector, TimeWindows
from modules.intelligence.core.models import Domain, MarketingSignals
from shared.utils.helpers import calculate_percentage

CAMPAIGN_COLUMNS = ["id", "name", "status", "sent_count", "open_count", "click_count"]


class MarketingCollector(BaseCollector):
    """
    Campaign open/click rates and lead source mix.

    Rates are averaged over campaigns that have sent at least one message;
    campaigns with nothing sent have no rate and are never flagged.
    """

    domain = Domain.MARKETING
    neutral = MarketingSignals

    async def _collect(self, tenant_id: str, windows: TimeWindows) -> MarketingSignals:
        t = self.thresholds

        campaigns = await self.store.fetch("campaigns", CAMPAIGN_COLUMNS, tenant_id)

        open_rates = []
        click_rates = []
        active = 0
        needing_attention = 0
        underperforming = 0
        outperforming = 0

        for campaign in campaigns:
            sent = campaign.get("sent_count") or 0
            is_active = campaign.get("status") == "active"
            if is_active:
                active += 1
            if sent <= 0:
                continue

            open_rate = calculate_percentage(campaign.get("open_count") or 0, sent)
            click_rate = calculate_percentage(campaign.get("click_count") or 0, sent)
            open_rates.append(open_rate)
            click_rates.append(click_rate)

            if not is_active:
                continue
            if open_rate < t.attention_open_rate:
                needing_attention += 1
            if open_rate < t.underperform_open_rate and sent > t.underperform_min_sent:
                underperforming += 1
            if open_rate > t.outperform_open_rate and sent > t.outperform_min_sent:
                outperforming += 1

        lead_sources = await self.store.group_count("prospects", "source", tenant_id)

        top_channel = None
        if lead_sources:
            # Highest count wins; ties break alphabetically for stable output
            top_channel = sorted(lead_sources.items(), key=lambda item: (-item[1], item[0]))[0][0]

        return MarketingSignals(
            total_campaigns=len(campaigns),
            active_campaigns=active,
            avg_open_rate=sum(open_rates) / len(open_rates) if open_rates else 0.0,
            avg_click_rate=sum(click_rates) / len(click_rates) if click_rates else 0.0,
            campaigns_needing_attention=needing_attention,
            underperforming_campaigns=underperforming,
            outperforming_campaigns=outperforming,
            lead_source_breakdown=lead_sources,
            top_channel=top_channel,
        )
