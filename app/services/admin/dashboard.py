"""Admin dashboard statistics over live (non-deleted) users."""

import calendar
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.models import User
from app.models.user import ROLE_ADMIN
from app.schemas.admin import ActivityLogEntry, DashboardStats, RecentUser

RECENT_USERS_LIMIT = 5


def one_month_before(value: datetime) -> datetime:
    """Same day of the previous month, clamped to that month's last day."""
    year, month = (value.year - 1, 12) if value.month == 1 else (value.year, value.month - 1)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


class DashboardService:
    def __init__(self, db: Session, *, clock: Clock = utcnow) -> None:
        self.db = db
        self._clock = clock

    def get_stats(self) -> DashboardStats:
        now = self._clock()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today_start - timedelta(days=7)
        month_start = one_month_before(today_start)

        live = self.db.query(User).filter(User.deleted_at.is_(None))
        recent = live.order_by(User.created_at.desc()).limit(RECENT_USERS_LIMIT).all()

        return DashboardStats(
            total_users=live.count(),
            active_users=live.filter(User.is_active.is_(True)).count(),
            admin_users=live.filter(User.role == ROLE_ADMIN).count(),
            new_users_today=live.filter(User.created_at >= today_start).count(),
            new_users_this_week=live.filter(User.created_at >= week_start).count(),
            new_users_this_month=live.filter(User.created_at >= month_start).count(),
            recent_users=[RecentUser.model_validate(u) for u in recent],
            # No activity log table yet; the dashboard shows the access itself
            recent_activity=[
                ActivityLogEntry(type="info", message="Dashboard accessed", timestamp=now)
            ],
        )
