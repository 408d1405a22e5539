"""
Streak Engine

Turns session start times into active days, finds runs of consecutive
days and reports the current and longest learning streak.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple, Union

from studytrack.models.session import Session

Day = Union[date, datetime]


def _midnight(t: datetime) -> datetime:
    return t.replace(hour=0, minute=0, second=0, microsecond=0)


def _calendar_day(d: Day) -> date:
    if isinstance(d, datetime):
        return d.date()
    return d


def get_active_days(sessions: Iterable[Session]) -> List[datetime]:
    """
    Unique days with at least one session, ascending.

    Each day is the session's start time normalized to midnight in its own
    timezone. A session running past midnight only counts for the day it
    started on; zero-duration sessions still count.
    """
    days = {}
    for s in sessions:
        key = s.start_time.date()
        if key not in days:
            days[key] = _midnight(s.start_time)

    return [days[key] for key in sorted(days)]


def find_streaks(active_days: List[Day]) -> List[int]:
    """Lengths of every run of consecutive days, in order."""
    if not active_days:
        return []

    streaks = []
    current = 1
    for prev, day in zip(active_days, active_days[1:]):
        if (_calendar_day(day) - _calendar_day(prev)).days == 1:
            current += 1
        else:
            streaks.append(current)
            current = 1

    streaks.append(current)
    return streaks


def calculate_streak(sessions: List[Session], as_of: Optional[datetime] = None) -> Tuple[int, int]:
    """
    Current and longest streak as of a reference time.

    The current streak is the last run, but only while its last day is
    as_of's day or the day before. Otherwise it is 0.

    Returns:
        (current_streak, longest_streak)
    """
    if not sessions:
        return 0, 0

    active_days = get_active_days(sessions)
    streaks = find_streaks(active_days)
    if not streaks:
        return 0, 0

    longest = max(streaks)

    as_of = as_of or datetime.now()
    today = as_of.date()
    last_day = active_days[-1].date()

    current = 0
    if last_day == today or last_day == today - timedelta(days=1):
        current = streaks[-1]

    return current, longest


def detect_streak_breaks(sessions: List[Session]) -> List[datetime]:
    """Every day without activity that sits between two active days."""
    active_days = get_active_days(sessions)
    if len(active_days) < 2:
        return []

    breaks = []
    for prev, day in zip(active_days, active_days[1:]):
        gap = (day.date() - prev.date()).days
        for d in range(1, gap):
            breaks.append(prev + timedelta(days=d))

    return breaks
