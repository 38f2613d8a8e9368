"""
Shared fixtures for intelligence tests.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from modules.intelligence.config_loader import IntelligenceConfig
from modules.intelligence.core.models import (
    FinanceSignals,
    MarketingSignals,
    OperationsSignals,
    PipelineSignals,
    SignalSnapshot,
)
from modules.intelligence.store import MemorySignalStore
from src.database.connection import Base

TENANT = "ws-acme"
OTHER_TENANT = "ws-other"

# Mid-month, mid-morning, so month and day windows are unambiguous
NOW = datetime(2026, 3, 18, 10, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def tenant_id() -> str:
    return TENANT


@pytest.fixture
def config() -> IntelligenceConfig:
    return IntelligenceConfig()


@pytest.fixture
def memory_store() -> MemorySignalStore:
    return MemorySignalStore()


def build_snapshot(
    tenant_id: str = TENANT,
    captured_at: datetime = NOW,
    pipeline: dict = None,
    marketing: dict = None,
    finance: dict = None,
    operations: dict = None,
) -> SignalSnapshot:
    """Snapshot with neutral signals except for the given overrides."""
    day_start = captured_at.replace(hour=0, minute=0, second=0, microsecond=0)
    return SignalSnapshot(
        tenant_id=tenant_id,
        captured_at=captured_at,
        day_end=day_start + timedelta(days=1),
        pipeline=PipelineSignals(**(pipeline or {})),
        marketing=MarketingSignals(**(marketing or {})),
        finance=FinanceSignals(**(finance or {})),
        operations=OperationsSignals(**(operations or {})),
    )


@pytest.fixture
def make_snapshot():
    return build_snapshot


@pytest.fixture
def seeded_store(now) -> MemorySignalStore:
    """
    A small but busy workspace.

    Produces hot and stale prospects, overdue and due-soon invoices, an
    overdue task backlog, a busy calendar, and one noisy tenant that must
    never leak into ws-acme's numbers.
    """
    store = MemorySignalStore()
    day = timedelta(days=1)

    # Prospects: 2 hot, 3 stale (non-terminal, untouched 20 days), 2 new this week
    store.extend("prospects", [
        dict(workspace_id=TENANT, id="p1", name="Globex", stage="proposal", estimated_value=8000,
             source="referral", created_at=now - 40 * day, updated_at=now - 2 * day),
        dict(workspace_id=TENANT, id="p2", name="Initech", stage="negotiation", estimated_value=12000,
             source="website", created_at=now - 30 * day, updated_at=now - 1 * day),
        dict(workspace_id=TENANT, id="p3", name="Umbrella", stage="lead", estimated_value=3000,
             source="website", created_at=now - 60 * day, updated_at=now - 20 * day),
        dict(workspace_id=TENANT, id="p4", name="Hooli", stage="qualified", estimated_value=5000,
             source="linkedin", created_at=now - 50 * day, updated_at=now - 25 * day),
        dict(workspace_id=TENANT, id="p5", name="Vandelay", stage="lead", estimated_value=4000,
             source="website", created_at=now - 45 * day, updated_at=now - 30 * day),
        dict(workspace_id=TENANT, id="p6", name="Stark", stage="lead", estimated_value=None,
             source=None, created_at=now - 2 * day, updated_at=now - 2 * day),
        dict(workspace_id=TENANT, id="p7", name="Wayne", stage="won", estimated_value=9000,
             source="referral", created_at=now - 3 * day, updated_at=now - 3 * day),
        dict(workspace_id=TENANT, id="p8", name="Wonka", stage="lost", estimated_value=1000,
             source="website", created_at=now - 90 * day, updated_at=now - 40 * day),
        dict(workspace_id=OTHER_TENANT, id="x1", name="Elsewhere", stage="proposal",
             estimated_value=99999, source="website", created_at=now, updated_at=now),
    ])

    store.extend("contacts", [
        dict(workspace_id=TENANT, id="c1", name="Ann", updated_at=now - 1 * day),
        dict(workspace_id=TENANT, id="c2", name="Bob", updated_at=now - 10 * day),
        dict(workspace_id=TENANT, id="c3", name="Cy", updated_at=now - 3 * day),
        dict(workspace_id=TENANT, id="c4", name="Di", updated_at=now - 30 * day),
    ])

    store.extend("campaigns", [
        # 10% open, active, sent > 50: underperforming and needs attention
        dict(workspace_id=TENANT, id="m1", name="Spring promo", status="active",
             sent_count=100, open_count=10, click_count=1),
        # 40% open, active, sent > 20: outperforming
        dict(workspace_id=TENANT, id="m2", name="Newsletter", status="active",
             sent_count=50, open_count=20, click_count=3),
        # Completed campaign still counts towards averages
        dict(workspace_id=TENANT, id="m3", name="Winter promo", status="completed",
             sent_count=200, open_count=50, click_count=4),
        # Draft with nothing sent has no rate
        dict(workspace_id=TENANT, id="m4", name="Draft", status="draft",
             sent_count=0, open_count=0, click_count=0),
    ])

    store.extend("invoices", [
        # Paid this month: 20,000
        dict(workspace_id=TENANT, id="i1", invoice_number="INV-001", customer_name="Globex",
             status="paid", total=12000, paid_at=now - 5 * day, created_at=now - 20 * day),
        dict(workspace_id=TENANT, id="i2", invoice_number="INV-002", customer_name="Initech",
             status="paid", total=8000, paid_at=now - 10 * day, created_at=now - 25 * day),
        # Paid last month: 16,000
        dict(workspace_id=TENANT, id="i3", invoice_number="INV-003", customer_name="Hooli",
             status="paid", total=16000, paid_at=datetime(2026, 2, 14, 12, 0), created_at=now - 45 * day),
        # Overdue: 6,000 total
        dict(workspace_id=TENANT, id="i4", invoice_number="INV-004", customer_name="Umbrella",
             status="overdue", total=4000, due_date=now - 10 * day, created_at=now - 40 * day),
        dict(workspace_id=TENANT, id="i5", invoice_number="INV-005", customer_name="Vandelay",
             status="overdue", total=2000, due_date=now - 5 * day, created_at=now - 35 * day),
        # Sent, due within 7 days
        dict(workspace_id=TENANT, id="i6", invoice_number="INV-006", customer_name="Stark",
             status="sent", total=3000, due_date=now + 2 * day, created_at=now - 5 * day),
        dict(workspace_id=TENANT, id="i7", invoice_number="INV-007", customer_name="Wayne",
             status="sent", total=2500, due_date=now + 5 * day, created_at=now - 3 * day),
        dict(workspace_id=TENANT, id="i8", invoice_number="INV-008", customer_name="Wonka",
             status="sent", total=1500, due_date=now + 6 * day, created_at=now - 2 * day),
        # Sent, due later
        dict(workspace_id=TENANT, id="i9", invoice_number="INV-009", customer_name="Hooli",
             status="sent", total=1000, due_date=now + 20 * day, created_at=now - 1 * day),
    ])

    store.extend("expenses", [
        dict(workspace_id=TENANT, id="e1", amount=5000, expense_date=now - 3 * day),
        dict(workspace_id=TENANT, id="e2", amount=1000, expense_date=datetime(2026, 2, 20)),
    ])

    store.extend("tasks", [
        dict(workspace_id=TENANT, id="t1", title="Call Globex", status="todo",
             due_date=now - 2 * day, created_at=now - 10 * day, updated_at=now - 10 * day),
        dict(workspace_id=TENANT, id="t2", title="Send proposal", status="in_progress",
             due_date=now - 1 * day, created_at=now - 8 * day, updated_at=now - 2 * day),
        dict(workspace_id=TENANT, id="t3", title="Book venue", status="todo",
             due_date=now - 4 * day, created_at=now - 6 * day, updated_at=now - 6 * day),
        dict(workspace_id=TENANT, id="t4", title="Update CRM", status="todo",
             due_date=now + 3 * day, created_at=now - 1 * day, updated_at=now - 1 * day),
        dict(workspace_id=TENANT, id="t5", title="File taxes", status="done",
             due_date=now - 3 * day, created_at=now - 5 * day, updated_at=now - 1 * day),
    ])

    # 5 events today, 1 later this week
    events = [
        dict(workspace_id=TENANT, id=f"ev{i}", title=f"Meeting {i}",
             start_time=now.replace(hour=11 + i), end_time=now.replace(hour=11 + i, minute=30))
        for i in range(5)
    ]
    events.append(dict(workspace_id=TENANT, id="ev9", title="Offsite",
                       start_time=now + 3 * day, end_time=now + 3 * day + timedelta(hours=2)))
    store.extend("calendar_events", events)

    store.extend("agents", [
        dict(workspace_id=TENANT, id="a1", name="Follow-up bot", status="active"),
        dict(workspace_id=TENANT, id="a2", name="Old bot", status="paused"),
    ])

    # 6 executions this week, 2 failed (33%)
    store.extend("agent_executions", [
        dict(workspace_id=TENANT, id=f"x{i}", agent_id="a1",
             status="failed" if i < 2 else "completed", started_at=now - timedelta(days=i))
        for i in range(6)
    ])

    return store


@pytest_asyncio.fixture
async def sqlite_session_maker():
    """Async session maker over a fresh in-memory SQLite database."""
    import src.database.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


# Signals the collectors derive from seeded_store, as plain overrides
SEEDED_SIGNALS = dict(
    pipeline=dict(
        total_leads=8, new_leads_this_week=2, hot_leads=2, hot_pipeline_value=20000,
        stale_leads=3, stale_pipeline_value=12000, pipeline_value=42000, avg_deal_size=6000,
        conversion_rate=100.0, total_contacts=4, contact_engagement=50.0,
    ),
    marketing=dict(
        total_campaigns=4, active_campaigns=2, avg_open_rate=25.0, avg_click_rate=3.0,
        campaigns_needing_attention=1, underperforming_campaigns=1, outperforming_campaigns=1,
        lead_source_breakdown={"referral": 2, "website": 4, "linkedin": 1}, top_channel="website",
    ),
    finance=dict(
        monthly_revenue=20000, last_month_revenue=16000, monthly_expenses=5000, profit=15000,
        profit_margin=75.0, cash_flow=15000, revenue_growth=25.0, outstanding_amount=8000,
        overdue_amount=6000, overdue_count=2, upcoming_due_count=3, upcoming_due_amount=7000,
        recent_invoice_count=6,
    ),
    operations=dict(
        pending_tasks=4, overdue_tasks=3, task_completion_rate=100 / 3, upcoming_events=6,
        events_today=5, active_agents=1, agent_executions=6, failed_executions=2,
        agent_success_rate=400 / 6, automation_coverage=50.0,
    ),
)


@pytest.fixture
def seeded_snapshot() -> SignalSnapshot:
    return build_snapshot(**SEEDED_SIGNALS)
