"""
Statistics Calculator

Pure functions that combine sessions and plans into TotalStats, PlanStats
and DailyStats snapshots. Nothing is cached; every call starts from the
raw records.
"""

from datetime import datetime
from typing import Dict, List, Optional

from studytrack.models.plan import Plan, Status
from studytrack.models.session import Session
from studytrack.models.stats import DailyStats, PlanStats, TimeRange, TotalStats
from studytrack.services.streak import calculate_streak

UNKNOWN_STATUS = 'unknown'


def _count_plans(plans: List[Plan]):
    active = 0
    completed = 0
    for plan in plans:
        if plan.status in (Status.NOT_STARTED, Status.IN_PROGRESS):
            active += 1
        elif plan.status == Status.COMPLETED:
            completed += 1
        # archived and skipped plans are not counted
    return active, completed


def _latest_start(sessions: List[Session]) -> Optional[datetime]:
    latest = None
    for s in sessions:
        if latest is None or s.start_time > latest:
            latest = s.start_time
    return latest


def calculate_total_stats(sessions: List[Session], plans: List[Plan],
                          as_of: Optional[datetime] = None) -> TotalStats:
    """
    Aggregate statistics across every session and plan.

    Plan counts never depend on sessions: a plan with no sessions yet is
    still active. With no sessions all session figures are zero and no
    streak is computed.
    """
    active_plans, completed_plans = _count_plans(plans)

    if not sessions:
        return TotalStats(active_plans=active_plans, completed_plans=completed_plans)

    total_minutes = sum(s.duration for s in sessions)
    current, longest = calculate_streak(sessions, as_of)

    return TotalStats(
        total_hours=total_minutes / 60.0,
        total_sessions=len(sessions),
        active_plans=active_plans,
        completed_plans=completed_plans,
        current_streak=current,
        longest_streak=longest,
        average_session=total_minutes / len(sessions),
        last_session_date=_latest_start(sessions),
    )


def calculate_plan_stats(plan_id: str, sessions: List[Session], plan: Optional[Plan]) -> PlanStats:
    """
    Statistics for a single plan.

    Title, planned hours, status and chunk progress always come from the
    plan, even before the first session. Without a plan record only the
    session figures are filled in.
    """
    plan_sessions = [s for s in sessions if s.plan_id == plan_id]
    total_minutes = sum(s.duration for s in plan_sessions)

    if plan is None:
        title = plan_id
        status = UNKNOWN_STATUS
        planned_hours = 0.0
        completed_chunks = 0
        total_chunks = 0
        progress = 0.0
    else:
        title = plan.title
        status = str(plan.status)
        planned_hours = plan.total_hours
        completed_chunks = plan.completed_chunks()
        total_chunks = len(plan.chunks)
        progress = plan.progress()

    return PlanStats(
        plan_id=plan_id,
        plan_title=title,
        status=status,
        total_hours=total_minutes / 60.0,
        planned_hours=planned_hours,
        session_count=len(plan_sessions),
        completed_chunks=completed_chunks,
        total_chunks=total_chunks,
        progress=progress,
        last_session=_latest_start(plan_sessions),
    )


def calculate_daily_stats(sessions: List[Session], time_range: TimeRange) -> List[DailyStats]:
    """
    Per-day buckets for sessions that started inside time_range.

    Only days with at least one session get a bucket. Plan ids keep the
    order they were first seen in.
    """
    buckets: Dict = {}

    for s in sessions:
        if not time_range.contains(s.start_time):
            continue

        key = s.start_time.date()
        bucket = buckets.get(key)
        if bucket is None:
            bucket = {
                'date': s.start_time.replace(hour=0, minute=0, second=0, microsecond=0),
                'duration': 0,
                'session_count': 0,
                'plans': [],
            }
            buckets[key] = bucket

        bucket['duration'] += s.duration
        bucket['session_count'] += 1
        if s.plan_id not in bucket['plans']:
            bucket['plans'].append(s.plan_id)

    return [
        DailyStats(
            date=b['date'],
            duration=b['duration'],
            session_count=b['session_count'],
            plans=tuple(b['plans']),
        )
        for _, b in sorted(buckets.items(), key=lambda item: item[0])
    ]


def aggregate_by_plan(sessions: List[Session], plans: List[Plan]) -> Dict[str, PlanStats]:
    """PlanStats for every plan, keyed by plan id in plan order."""
    return {plan.id: calculate_plan_stats(plan.id, sessions, plan) for plan in plans}
