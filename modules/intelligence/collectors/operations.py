"""
Operations signals: tasks, calendar, and automation agents.
"""

from modules.intelligence.collectors.base import BaseCollector, TimeWindows
from modules.intelligence.core.models import Domain, OperationsSignals
from modules.intelligence.store.base import Condition
from shared.utils.helpers import calculate_percentage

OPEN_TASK_STATUSES = ("todo", "in_progress")
ACTIVE_AGENT_STATUSES = ("active", "published")


class OperationsCollector(BaseCollector):
    """Task backlog and throughput, meeting load, and agent reliability."""

    domain = Domain.OPERATIONS
    neutral = OperationsSignals

    async def _collect(self, tenant_id: str, windows: TimeWindows) -> OperationsSignals:
        store = self.store
        recent = Condition("created_at", "gte", windows.week_ago)

        pending = await store.count("tasks", tenant_id, [
            Condition("status", "in", OPEN_TASK_STATUSES),
        ])
        overdue = await store.count("tasks", tenant_id, [
            Condition("due_date", "lt", windows.now),
            Condition("status", "ne", "done"),
        ])
        completed_this_week = await store.count("tasks", tenant_id, [
            Condition("status", "eq", "done"),
            Condition("updated_at", "gte", windows.week_ago),
        ])
        created_this_week = await store.count("tasks", tenant_id, [recent])

        upcoming_events = await store.count("calendar_events", tenant_id, [
            Condition("start_time", "gte", windows.now),
            Condition("start_time", "lte", windows.week_ahead),
        ])
        events_today = await store.count("calendar_events", tenant_id, [
            Condition("start_time", "gte", windows.day_start),
            Condition("start_time", "lt", windows.day_end),
        ])

        total_agents = await store.count("agents", tenant_id)
        active_agents = await store.count("agents", tenant_id, [
            Condition("status", "in", ACTIVE_AGENT_STATUSES),
        ])

        this_week = Condition("started_at", "gte", windows.week_ago)
        executions = await store.count("agent_executions", tenant_id, [this_week])
        successful = await store.count("agent_executions", tenant_id, [
            this_week,
            Condition("status", "eq", "completed"),
        ])
        failed = await store.count("agent_executions", tenant_id, [
            this_week,
            Condition("status", "eq", "failed"),
        ])

        # Tasks closed this week can predate the week, so cap at 100
        completion_rate = min(100.0, calculate_percentage(completed_this_week, created_this_week))

        return OperationsSignals(
            pending_tasks=pending,
            overdue_tasks=overdue,
            task_completion_rate=completion_rate,
            upcoming_events=upcoming_events,
            events_today=events_today,
            active_agents=active_agents,
            agent_executions=executions,
            failed_executions=failed,
            agent_success_rate=calculate_percentage(successful, executions) if executions else 100.0,
            automation_coverage=calculate_percentage(active_agents, total_agents),
        )
