from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from civicops.core.db import get_db
from civicops.schemas.analytics import (
    AnalyticsDashboard,
    AnalyticsOverview,
    CategoryStats,
    DashboardSummary,
    DepartmentStats,
    ReportTrend,
    TimeRange,
    UserPerformance,
)
from civicops.services.analytics import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])

RANGE_QUERY = Query("7d", alias="range", description="One of 7d, 30d, 90d.")


@router.get("/time-ranges", response_model=List[TimeRange])
def get_time_ranges(db: Session = Depends(get_db)):
    return AnalyticsService(db).get_time_ranges()


@router.get("/overview", response_model=AnalyticsOverview)
def get_overview(time_range: str = RANGE_QUERY, db: Session = Depends(get_db)):
    return AnalyticsService(db).get_overview(time_range)


@router.get("/trends", response_model=List[ReportTrend])
def get_report_trends(time_range: str = RANGE_QUERY, db: Session = Depends(get_db)):
    """
    One bucket per day in the window, zero-filled where nothing was created.
    """
    return AnalyticsService(db).get_report_trends(time_range)


@router.get("/departments", response_model=List[DepartmentStats])
def get_department_stats(db: Session = Depends(get_db)):
    return AnalyticsService(db).get_department_stats()


@router.get("/performance", response_model=List[UserPerformance])
def get_user_performance(db: Session = Depends(get_db)):
    return AnalyticsService(db).get_user_performance()


@router.get("/categories", response_model=List[CategoryStats])
def get_category_stats(db: Session = Depends(get_db)):
    return AnalyticsService(db).get_category_stats()


@router.get("/dashboard", response_model=AnalyticsDashboard)
def get_dashboard(time_range: str = RANGE_QUERY, db: Session = Depends(get_db)):
    """
    Every aggregation in one response. Failed aggregations come back empty.
    """
    return AnalyticsService(db).get_dashboard(time_range)


@router.get("/summary", response_model=DashboardSummary)
def get_dashboard_summary(db: Session = Depends(get_db)):
    return AnalyticsService(db).get_dashboard_summary()
