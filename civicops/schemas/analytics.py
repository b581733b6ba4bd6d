from typing import List, Optional
from datetime import datetime

from civicops.schemas.report import CamelModel


class AnalyticsOverview(CamelModel):
    total_reports: int = 0
    resolved_reports: int = 0
    pending_reports: int = 0
    active_users: int = 0
    average_resolution_time: float = 0
    satisfaction_rate: float = 0


class ReportTrend(CamelModel):
    date: str
    created: int = 0
    resolved: int = 0
    pending: int = 0


class DepartmentStats(CamelModel):
    department: str
    total_reports: int = 0
    resolved: int = 0
    average_resolution_time: float = 0


class UserPerformance(CamelModel):
    user_id: str
    user_name: str
    department: str
    assigned_reports: int
    completed_reports: int
    completion_rate: float
    average_resolution_time: float


class CategoryStats(CamelModel):
    category: str
    count: int
    trend: int


class TimeRange(CamelModel):
    label: str
    value: str
    days: int


class AnalyticsDashboard(CamelModel):
    overview: AnalyticsOverview
    trends: List[ReportTrend]
    departments: List[DepartmentStats]
    performance: List[UserPerformance]
    categories: List[CategoryStats]


class Activity(CamelModel):
    id: str
    type: str
    description: str
    timestamp: datetime
    user: Optional[str] = None


class DashboardSummary(CamelModel):
    total_residents: int
    total_reports: int
    active_projects: int
    recent_activity: List[Activity]
