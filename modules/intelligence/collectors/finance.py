"""
Finance signals: revenue, expenses, and invoice exposure.
"""

from typing import Any, Dict, List

from modules.intelligence.collectors.base import BaseCollector, TimeWindows
from modules.intelligence.core.models import Domain, EntityRef, FinanceSignals
from modules.intelligence.store.base import Condition
from shared.utils.helpers import calculate_percentage, safe_ratio

MAX_ENTITY_REFS = 5


def _invoice_refs(rows: List[Dict[str, Any]]) -> tuple:
    refs = []
    for row in rows:
        label = row.get("invoice_number") or str(row["id"])
        if row.get("customer_name"):
            label = f"{label} ({row['customer_name']})"
        refs.append(EntityRef(type="invoice", id=str(row["id"]), name=label))
    return tuple(refs)


class FinanceCollector(BaseCollector):
    """
    Month-to-date revenue against last month, plus invoice exposure.

    Revenue is the total of invoices paid within the calendar month.
    Outstanding means status 'sent'; overdue means status 'overdue'.
    """

    domain = Domain.FINANCE
    neutral = FinanceSignals

    async def _collect(self, tenant_id: str, windows: TimeWindows) -> FinanceSignals:
        store = self.store

        paid = Condition("status", "eq", "paid")
        sent = Condition("status", "eq", "sent")
        overdue = [Condition("status", "eq", "overdue")]

        monthly_revenue = await store.total("invoices", "total", tenant_id, [
            paid,
            Condition("paid_at", "gte", windows.month_start),
            Condition("paid_at", "lt", windows.next_month_start),
        ])
        last_month_revenue = await store.total("invoices", "total", tenant_id, [
            paid,
            Condition("paid_at", "gte", windows.last_month_start),
            Condition("paid_at", "lt", windows.month_start),
        ])
        monthly_expenses = await store.total("expenses", "amount", tenant_id, [
            Condition("expense_date", "gte", windows.month_start),
            Condition("expense_date", "lt", windows.next_month_start),
        ])

        outstanding = await store.total("invoices", "total", tenant_id, [sent])

        overdue_amount = await store.total("invoices", "total", tenant_id, overdue)
        overdue_count = await store.count("invoices", tenant_id, overdue)
        overdue_rows = await store.fetch(
            "invoices", ["id", "invoice_number", "customer_name"], tenant_id, overdue,
            order_by="total", descending=True, limit=MAX_ENTITY_REFS,
        )

        due_soon = [
            sent,
            Condition("due_date", "gte", windows.now),
            Condition("due_date", "lte", windows.week_ahead),
        ]
        upcoming_count = await store.count("invoices", tenant_id, due_soon)
        upcoming_amount = await store.total("invoices", "total", tenant_id, due_soon)

        recent_invoices = await store.count("invoices", tenant_id, [
            Condition("created_at", "gte", windows.recent_invoice_cutoff),
        ])

        profit = monthly_revenue - monthly_expenses
        if last_month_revenue > 0:
            revenue_growth = safe_ratio(monthly_revenue - last_month_revenue, last_month_revenue) * 100
        else:
            revenue_growth = 0.0

        return FinanceSignals(
            monthly_revenue=monthly_revenue,
            last_month_revenue=last_month_revenue,
            monthly_expenses=monthly_expenses,
            profit=profit,
            profit_margin=calculate_percentage(profit, monthly_revenue),
            cash_flow=profit,
            revenue_growth=revenue_growth,
            outstanding_amount=outstanding,
            overdue_amount=overdue_amount,
            overdue_count=overdue_count,
            upcoming_due_count=upcoming_count,
            upcoming_due_amount=upcoming_amount,
            recent_invoice_count=recent_invoices,
            overdue_invoices=_invoice_refs(overdue_rows),
        )
