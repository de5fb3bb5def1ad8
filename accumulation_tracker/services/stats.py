"""
Per-preset statistics, recomputed on demand from stored session histories.

Histories are duck-typed: ORM rows and HistoryRead models both work, as long
as they expose date, session_duration, attempt_count, total_accumulated and
attempts[].value.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence

from accumulation_tracker.engine import SessionState, best_hold

TREND_WINDOW = 5
IMPROVING_RATIO = 0.95
DECLINING_RATIO = 1.05


class Trend(str, Enum):
    improving = "improving"   # sessions getting faster
    declining = "declining"   # sessions getting slower
    stable = "stable"


@dataclass(frozen=True, slots=True)
class PresetStats:
    total_sessions: int
    average_duration: int     # seconds
    best_duration: int        # seconds
    average_attempts: float
    trend: Trend


@dataclass(frozen=True, slots=True)
class PersonalRecords:
    best_hold: bool
    fastest_completion: bool
    highest_total: bool


@dataclass(frozen=True, slots=True)
class ProgressPoint:
    session_number: int
    total_accumulated: float
    session_duration: int
    best_hold: float


def newest_first(histories: Iterable) -> list:
    return sorted(histories, key=lambda h: h.date, reverse=True)


def duration_trend(durations: Sequence[int]) -> Trend:
    """Compare the mean of the newest 5 durations against the 5 before them.

    ``durations`` must be ordered newest first. Means truncate like the
    stored durations do.
    """
    recent = list(durations[:TREND_WINDOW])
    previous = list(durations[TREND_WINDOW:2 * TREND_WINDOW])
    if not recent or not previous:
        return Trend.stable
    recent_avg = sum(recent) // len(recent)
    previous_avg = sum(previous) // len(previous)
    if recent_avg < previous_avg * IMPROVING_RATIO:
        return Trend.improving
    if recent_avg > previous_avg * DECLINING_RATIO:
        return Trend.declining
    return Trend.stable


def compute_preset_stats(histories: Iterable) -> PresetStats | None:
    histories = newest_first(histories)
    if not histories:
        return None
    durations = [h.session_duration for h in histories]
    total = len(histories)
    return PresetStats(
        total_sessions=total,
        average_duration=sum(durations) // total,
        best_duration=min(durations),
        average_attempts=sum(h.attempt_count for h in histories) / total,
        trend=duration_trend(durations),
    )


def check_personal_records(state: SessionState, duration: int, previous: Iterable) -> PersonalRecords:
    """Records set by a just-finished session against earlier sessions of the same preset."""
    previous = list(previous)
    if not previous:
        # first session ever: everything is a record
        return PersonalRecords(best_hold=True, fastest_completion=True, highest_total=True)

    historical_best_hold = max(
        (a.value for h in previous for a in h.attempts),
        default=0,
    )
    return PersonalRecords(
        best_hold=best_hold(state) > historical_best_hold,
        fastest_completion=duration < min(h.session_duration for h in previous),
        highest_total=state.accumulated_total > max(h.total_accumulated for h in previous),
    )


def progress_series(histories: Iterable) -> list[ProgressPoint]:
    """Oldest-first points for a progress graph."""
    ordered = sorted(histories, key=lambda h: h.date)
    return [
        ProgressPoint(
            session_number=i,
            total_accumulated=h.total_accumulated,
            session_duration=h.session_duration,
            best_hold=max((a.value for a in h.attempts), default=0),
        )
        for i, h in enumerate(ordered, start=1)
    ]


@dataclass(frozen=True, slots=True)
class PresetOverview:
    preset_id: int
    name: str
    total_sessions: int
    best_session: float             # highest accumulated total
    average_accumulated: float
    average_attempts: float
    average_session_duration: float
    last_session_date: datetime
    trend: Trend


def compute_overview(presets_with_histories: Iterable[tuple]) -> list[PresetOverview]:
    """Summaries for the history screen; presets without sessions are left out."""
    overview = []
    for preset, histories in presets_with_histories:
        histories = newest_first(histories)
        if not histories:
            continue
        n = len(histories)
        overview.append(PresetOverview(
            preset_id=preset.id,
            name=preset.name,
            total_sessions=n,
            best_session=max(h.total_accumulated for h in histories),
            average_accumulated=sum(h.total_accumulated for h in histories) / n,
            average_attempts=sum(h.attempt_count for h in histories) / n,
            average_session_duration=sum(h.session_duration for h in histories) / n,
            last_session_date=histories[0].date,
            trend=duration_trend([h.session_duration for h in histories]),
        ))
    return overview
