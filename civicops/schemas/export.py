from pydantic import Field, model_validator
from typing import Optional, List
from datetime import datetime

from civicops.schemas.report import CamelModel


class DateRange(CamelModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.start:
            raise ValueError("dateRange.end must not be before dateRange.start")
        return self


class ExportFilter(CamelModel):
    """
    Filters for an export run. The value "all" disables a filter.
    """
    status: Optional[str] = "all"
    assigned_to: Optional[str] = Field("all", description="Employee id, or 'all'.")
    category: Optional[str] = "all"
    department: Optional[str] = "all"
    date_range: Optional[DateRange] = None


class ExportRequest(CamelModel):
    filters: ExportFilter = Field(default_factory=ExportFilter)
    filename: str = Field("reports-export", pattern=r"^[A-Za-z0-9._-]+$")


class ReportExportRow(CamelModel):
    id: str
    title: str
    description: str
    category: str
    status: str
    priority: str
    assigned_to: str
    assigned_department: str
    created_at: str
    resolved_at: Optional[str] = None
    location: str
    rating: Optional[float] = None
    feedback: Optional[str] = None


class ExportEmployee(CamelModel):
    id: str
    name: str
    department: str


class ExportOptions(CamelModel):
    categories: List[str]
    departments: List[str]
    employees: List[ExportEmployee]
