import logging
import math
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from civicops.core.config import settings
from civicops.core.lifecycle import PENDING_STATUSES, RESOLVED_STATUSES, ReportStatus
from civicops.models.report import Report
from civicops.models.user import User
from civicops.schemas.analytics import (
    Activity,
    AnalyticsDashboard,
    AnalyticsOverview,
    CategoryStats,
    DashboardSummary,
    DepartmentStats,
    ReportTrend,
    TimeRange,
    UserPerformance,
)
from civicops.schemas.user import UserTypeEnum

logger = logging.getLogger(__name__)

TIME_RANGES = [
    TimeRange(label="Last 7 days", value="7d", days=7),
    TimeRange(label="Last 30 days", value="30d", days=30),
    TimeRange(label="Last 90 days", value="90d", days=90),
]
DEFAULT_RANGE_DAYS = 7

STAFF_TYPES = (UserTypeEnum.EMPLOYEE.value, UserTypeEnum.ADMIN.value)
UNASSIGNED = "Unassigned"

SECONDS_PER_DAY = 24 * 60 * 60


def date_range(time_range: str, now: Optional[datetime] = None):
    """
    Window for a range value: from N days before `now` at midnight to the end of `now`'s day.
    """
    now = now or datetime.utcnow()
    days = next((r.days for r in TIME_RANGES if r.value == time_range), DEFAULT_RANGE_DAYS)
    start = (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def resolution_days(report: Report) -> float:
    return (report.resolved_at - report.created_at).total_seconds() / SECONDS_PER_DAY


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percentage_trend(current: int, previous: int) -> int:
    if previous > 0:
        return int(round_half_up((current - previous) / previous * 100))
    return 100 if current > 0 else 0


def is_resolved(report: Report) -> bool:
    return report.status in RESOLVED_STATUSES


class AnalyticsService:
    """
    Dashboard aggregations computed in memory over full collection scans.

    Aggregations never raise: a failure is logged, the session is rolled back
    so later aggregations can still run, and an empty or zeroed
    result is returned so the dashboard still renders.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_time_ranges(self) -> List[TimeRange]:
        return list(TIME_RANGES)

    def get_overview(self, time_range: str = "7d", now: Optional[datetime] = None) -> AnalyticsOverview:
        start, end = date_range(time_range, now)
        try:
            reports = self._reports_between(start, end)
            all_reports = self.db.query(Report).all()
            staff = self._staff()

            resolved = sum(1 for r in reports if is_resolved(r))
            pending = sum(1 for r in reports if r.status in PENDING_STATUSES)

            timed = [r for r in all_reports if is_resolved(r) and r.resolved_at and r.created_at]
            average = sum(abs(resolution_days(r)) for r in timed) / len(timed) if timed else 0

            return AnalyticsOverview(
                total_reports=len(reports),
                resolved_reports=resolved,
                pending_reports=pending,
                active_users=sum(1 for u in staff if u.is_active is not False),
                average_resolution_time=round_half_up(average, 1),
                satisfaction_rate=self._satisfaction_rate(reports),
            )
        except Exception:
            logger.exception("Error computing analytics overview (range=%s)", time_range)
            self.db.rollback()
            return AnalyticsOverview()

    def get_report_trends(self, time_range: str = "7d", now: Optional[datetime] = None) -> List[ReportTrend]:
        start, end = date_range(time_range, now)
        try:
            buckets: Dict[str, ReportTrend] = OrderedDict()
            day = start.date()
            while day <= end.date():
                key = day.isoformat()
                buckets[key] = ReportTrend(date=key)
                day += timedelta(days=1)

            for report in self._reports_between(start, end):
                bucket = buckets.get(report.created_at.date().isoformat())
                if bucket is None:
                    continue
                bucket.created += 1
                if is_resolved(report):
                    bucket.resolved += 1
                elif report.status in PENDING_STATUSES:
                    bucket.pending += 1

            return list(buckets.values())
        except Exception:
            logger.exception("Error computing report trends (range=%s)", time_range)
            self.db.rollback()
            return []

    def get_department_stats(self) -> List[DepartmentStats]:
        try:
            grouped: Dict[str, List[Report]] = {}
            for report in self.db.query(Report).all():
                grouped.setdefault(report.assigned_department or UNASSIGNED, []).append(report)

            stats = []
            for department, reports in grouped.items():
                if department == UNASSIGNED:
                    continue
                timed = [r for r in reports if is_resolved(r) and r.resolved_at and r.created_at]
                average = sum(resolution_days(r) for r in timed) / len(timed) if timed else 0
                stats.append(DepartmentStats(
                    department=department,
                    total_reports=len(reports),
                    resolved=sum(1 for r in reports if is_resolved(r)),
                    average_resolution_time=round_half_up(average, 1),
                ))
            return sorted(stats, key=lambda s: s.total_reports, reverse=True)
        except Exception:
            logger.exception("Error computing department stats")
            self.db.rollback()
            return []

    def get_user_performance(self, limit: int = 10) -> List[UserPerformance]:
        try:
            reports = self.db.query(Report).filter(Report.assigned_to_id.isnot(None)).all()
            by_assignee: Dict[str, List[Report]] = {}
            for report in reports:
                by_assignee.setdefault(report.assigned_to_id, []).append(report)

            performance = []
            for user in self._staff():
                assigned = by_assignee.get(user.id, [])
                if not assigned:
                    continue
                completed = [r for r in assigned if is_resolved(r)]
                timed = [r for r in completed if r.resolved_at and r.created_at]
                average = sum(resolution_days(r) for r in timed) / len(timed) if timed else 0
                performance.append(UserPerformance(
                    user_id=user.id,
                    user_name=user.full_name or "Unknown User",
                    department=user.department or UNASSIGNED,
                    assigned_reports=len(assigned),
                    completed_reports=len(completed),
                    completion_rate=round_half_up(len(completed) / len(assigned) * 100, 1),
                    average_resolution_time=round_half_up(average, 1),
                ))

            performance.sort(key=lambda p: p.completion_rate, reverse=True)
            return performance[:limit]
        except Exception:
            logger.exception("Error computing user performance")
            self.db.rollback()
            return []

    def get_category_stats(self, now: Optional[datetime] = None, limit: int = 8) -> List[CategoryStats]:
        now = now or datetime.utcnow()
        current_start = now - timedelta(days=30)
        previous_start = now - timedelta(days=60)
        try:
            reports = (
                self.db.query(Report)
                .order_by(Report.created_at.desc())
                .limit(settings.CATEGORY_STATS_SCAN_LIMIT)
                .all()
            )

            current: Dict[str, int] = OrderedDict()
            previous: Dict[str, int] = {}
            for report in reports:
                if report.created_at is None:
                    continue
                category = report.category or "Other"
                if report.created_at >= current_start:
                    current[category] = current.get(category, 0) + 1
                elif report.created_at >= previous_start:
                    previous[category] = previous.get(category, 0) + 1

            stats = [
                CategoryStats(category=category, count=count, trend=percentage_trend(count, previous.get(category, 0)))
                for category, count in current.items()
            ]
            stats.sort(key=lambda s: s.count, reverse=True)
            return stats[:limit]
        except Exception:
            logger.exception("Error computing category stats")
            self.db.rollback()
            return []

    def get_dashboard(self, time_range: str = "7d", now: Optional[datetime] = None) -> AnalyticsDashboard:
        return AnalyticsDashboard(
            overview=self.get_overview(time_range, now),
            trends=self.get_report_trends(time_range, now),
            departments=self.get_department_stats(),
            performance=self.get_user_performance(),
            categories=self.get_category_stats(now),
        )

    def get_dashboard_summary(self, recent: int = 5) -> DashboardSummary:
        """
        Headline counters and the most recent submissions.
        Unlike the aggregations above, failures here propagate to the caller.
        """
        users = self.db.query(User).all()
        reports = self.db.query(Report).order_by(Report.created_at.desc(), Report.id.asc()).all()
        names = {user.id: user.full_name for user in users}

        activity = []
        for report in reports[:recent]:
            user_name = names.get(report.user_id) or "Unknown User"
            activity.append(Activity(
                id=report.id,
                type="report_created",
                description=f"New {report.issue_type or 'service'} request from {user_name}",
                timestamp=report.created_at,
                user=user_name,
            ))

        return DashboardSummary(
            total_residents=sum(1 for u in users if u.user_type == UserTypeEnum.RESIDENT.value),
            total_reports=len(reports),
            active_projects=sum(1 for r in reports if r.status in (ReportStatus.IN_PROGRESS, ReportStatus.ASSIGNED)),
            recent_activity=activity,
        )

    def _reports_between(self, start: datetime, end: datetime) -> List[Report]:
        return (
            self.db.query(Report)
            .filter(Report.created_at >= start, Report.created_at <= end)
            .order_by(Report.created_at.asc())
            .all()
        )

    def _staff(self) -> List[User]:
        return self.db.query(User).filter(User.user_type.in_(STAFF_TYPES)).all()

    def _satisfaction_rate(self, reports: List[Report]) -> float:
        ratings = [r.rating for r in reports if r.rating is not None]
        if not ratings:
            return 0
        return round_half_up(sum(ratings) / len(ratings), 1)
