from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List

from flask import Blueprint, current_app, render_template
from sqlalchemy import func

from .auth import login_required
from .models import db, Workout
from .training import PROGRAMS

dashboard_bp = Blueprint('dashboard', __name__)

DAILY_GOAL = 2
TREND_DAYS = 5


@dataclass
class DashboardSummary:
    username: str
    today_count: int
    total_count: int
    daily_goal: int
    progress: float
    labels: List[str]
    counts: List[int]
    recent: list


def daily_progress(today_count, goal=DAILY_GOAL):
    """Percentage of the daily goal reached, capped at 100."""
    return min(100, today_count / goal * 100)


def trend_window(today, days=TREND_DAYS):
    return [today - timedelta(days=i) for i in range(days - 1, -1, -1)]


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def build_trend(today, rows, days=TREND_DAYS):
    """Per-day workout counts for the window ending today, oldest first.

    ``rows`` are ``(day, count)`` pairs from a grouped query in any order.
    Days without rows stay at 0; rows outside the window are ignored.
    """
    counts = {d: 0 for d in trend_window(today, days)}
    for day, count in rows:
        day = _as_date(day)
        if day in counts:
            counts[day] = int(count)
    labels = [d.isoformat() for d in counts]
    return labels, list(counts.values())


def _day_start(day):
    return datetime.combine(day, time.min)


def count_today(user_id, today):
    start = _day_start(today)
    return Workout.query.filter(
        Workout.user_id == user_id,
        Workout.workout_date >= start,
        Workout.workout_date < start + timedelta(days=1),
    ).count()


def count_total(user_id):
    return Workout.query.filter_by(user_id=user_id).count()


def trend_rows(user_id, today, days=TREND_DAYS):
    day = func.date(Workout.workout_date)
    return (
        db.session.query(day, func.count(Workout.id))
        .filter(Workout.user_id == user_id,
                Workout.workout_date >= _day_start(today - timedelta(days=days - 1)))
        .group_by(day)
        .all()
    )


def recent_workouts(user_id, limit=10):
    return (
        Workout.query.filter_by(user_id=user_id)
        .order_by(Workout.workout_date.desc(), Workout.id.desc())
        .limit(limit)
        .all()
    )


def summarize(identity, today=None):
    today = today or date.today()
    goal = current_app.config.get('DAILY_WORKOUT_GOAL', DAILY_GOAL)
    today_count = count_today(identity.user_id, today)
    labels, counts = build_trend(today, trend_rows(identity.user_id, today))
    return DashboardSummary(
        username=identity.username,
        today_count=today_count,
        total_count=count_total(identity.user_id),
        daily_goal=goal,
        progress=daily_progress(today_count, goal),
        labels=labels,
        counts=counts,
        recent=recent_workouts(identity.user_id),
    )


@dashboard_bp.route('/dashboard')
@login_required
def dashboard(identity):
    summary = summarize(identity)
    return render_template('dashboard.html', summary=summary, programs=PROGRAMS)
