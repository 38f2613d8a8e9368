"""
Task, calendar, and agent rules.
"""

from modules.intelligence.core.models import Domain, InsightType, Urgency
from modules.intelligence.rules.registry import insight_rule, make_insight
from shared.utils.helpers import calculate_percentage

OPERATIONS = [Domain.OPERATIONS]


@insight_rule("task_backlog", OPERATIONS)
def task_backlog(snapshot, thresholds):
    o = snapshot.operations
    if o.overdue_tasks < thresholds.overdue_tasks_min:
        return []

    return [make_insight(
        "task_backlog", snapshot, OPERATIONS,
        type=InsightType.RISK,
        urgency=Urgency.SOON,
        title="Task backlog building up",
        description=f"{o.overdue_tasks} tasks are past their due date.",
        impact="Overdue tasks can block progress and create cascading delays.",
        suggested_action="Review and prioritize overdue tasks, reschedule or delegate.",
        offer_to_help="Want me to help prioritize these and suggest new due dates?",
        confidence=0.9,
        priority=6,
    )]


@insight_rule("busy_day", OPERATIONS)
def busy_day(snapshot, thresholds):
    o = snapshot.operations
    if o.events_today < thresholds.busy_day_events:
        return []

    return [make_insight(
        "busy_day", snapshot, OPERATIONS,
        type=InsightType.PATTERN,
        urgency=Urgency.IMMEDIATE,
        title="Full calendar today",
        description=f"You have {o.events_today} meetings/events scheduled today.",
        impact="Heavy meeting days leave less time for focused work.",
        suggested_action="Consider blocking time for priority tasks between meetings.",
        offer_to_help="Want me to identify which meetings might be candidates for async follow-ups?",
        confidence=0.85,
        priority=5,
        expires_at=snapshot.day_end,
    )]


@insight_rule("agent_reliability", OPERATIONS)
def agent_reliability(snapshot, thresholds):
    o = snapshot.operations
    if o.agent_executions < thresholds.agent_min_executions:
        return []

    fail_rate = calculate_percentage(o.failed_executions, o.agent_executions)
    if fail_rate <= thresholds.agent_failure_rate_pct:
        return []

    return [make_insight(
        "agent_reliability", snapshot, OPERATIONS,
        type=InsightType.RISK,
        urgency=Urgency.SOON,
        title="Agent reliability issue",
        description=(
            f"{fail_rate:.0f}% of agent executions failed this week "
            f"({o.failed_executions}/{o.agent_executions})."
        ),
        impact="Failing agents may be missing important automations.",
        suggested_action="Review failing agents and fix configuration issues.",
        offer_to_help="Want me to identify which agents are having issues and suggest fixes?",
        confidence=0.85,
        priority=7,
    )]


@insight_rule("automation_efficiency", OPERATIONS)
def automation_efficiency(snapshot, thresholds):
    o = snapshot.operations
    if not (o.active_agents > 0 and o.task_completion_rate > thresholds.automation_completion_rate):
        return []

    return [make_insight(
        "automation_efficiency", snapshot, OPERATIONS,
        type=InsightType.INSIGHT,
        urgency=Urgency.WHEN_RELEVANT,
        title="Automation improving task throughput",
        description=(
            f"With {o.active_agents} active agents and {o.task_completion_rate:.0f}% task "
            f"completion rate, your operational efficiency is solid."
        ),
        impact="Automation is freeing up time for higher-value work.",
        suggested_action="Consider adding agents for your most repetitive remaining tasks.",
        offer_to_help="Want me to suggest which recurring tasks could be automated next?",
        confidence=0.75,
        priority=3,
    )]
