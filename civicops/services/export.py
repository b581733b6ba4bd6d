import csv
import io
import logging
from datetime import datetime
from html import escape
from typing import Iterator, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civicops.models.report import Report
from civicops.models.user import User
from civicops.schemas.export import ExportEmployee, ExportFilter, ReportExportRow
from civicops.services.analytics import STAFF_TYPES

logger = logging.getLogger(__name__)

ALL = "all"

CSV_HEADERS = [
    "ID", "Title", "Description", "Category", "Status", "Priority",
    "Assigned To", "Department", "Created Date", "Resolved Date",
    "Location", "Rating", "Feedback",
]

HTML_HEADERS = [
    "ID", "Title", "Category", "Status", "Priority", "Assigned To",
    "Department", "Created Date", "Location", "Rating",
]

HTML_STYLE = """
    body { font-family: Arial, sans-serif; margin: 20px; }
    h1 { color: #333; border-bottom: 2px solid #333; padding-bottom: 10px; }
    table { width: 100%; border-collapse: collapse; margin-top: 20px; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background-color: #f5f5f5; font-weight: bold; }
    tr:nth-child(even) { background-color: #f9f9f9; }
    .header { display: flex; justify-content: space-between; margin-bottom: 20px; }
    .summary { background-color: #f0f8ff; padding: 15px; border-radius: 5px; margin-bottom: 20px; }
"""


def format_date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _active(value) -> bool:
    return bool(value) and value != ALL


class ExportService:
    """
    Builds filtered report rows and renders them as CSV or as a printable
    HTML document (the browser's print-to-PDF produces the PDF).
    """

    def __init__(self, db: Session):
        self.db = db

    def get_reports_for_export(self, filters: ExportFilter) -> List[ReportExportRow]:
        query = self.db.query(Report)
        if _active(filters.status):
            query = query.filter(Report.status == filters.status)
        if _active(filters.assigned_to):
            query = query.filter(Report.assigned_to_id == filters.assigned_to)
        if filters.date_range is not None:
            query = query.filter(
                Report.created_at >= filters.date_range.start,
                Report.created_at <= filters.date_range.end,
            )
        if _active(filters.category):
            query = query.filter(Report.category == filters.category)
        if _active(filters.department):
            query = query.filter(Report.assigned_department == filters.department)

        try:
            reports = query.order_by(Report.created_at.desc(), Report.id.asc()).all()
            names = {user.id: user.full_name for user in self.db.query(User).all()}
        except SQLAlchemyError:
            logger.error("Failed to fetch reports for export")
            raise

        return [
            ReportExportRow(
                id=report.id,
                title=report.title or "No Title",
                description=report.description or "",
                category=report.category or "Uncategorized",
                status=report.status or "Unknown",
                priority=report.priority or "MEDIUM",
                assigned_to=names.get(report.assigned_to_id) or report.assigned_to or "Unassigned",
                assigned_department=report.assigned_department or "Unassigned",
                created_at=format_date(report.created_at) or "Unknown",
                resolved_at=format_date(report.resolved_at) or None,
                location=report.address or (report.location or {}).get("address") or "No Location",
                rating=report.rating,
                feedback=report.feedback,
            )
            for report in reports
        ]

    def get_employees(self) -> List[ExportEmployee]:
        try:
            users = self.db.query(User).filter(User.user_type.in_(STAFF_TYPES)).all()
        except SQLAlchemyError:
            logger.exception("Error fetching employees for export")
            return []
        return [
            ExportEmployee(id=user.id, name=user.full_name or "", department=user.department or "Unassigned")
            for user in users
        ]

    def get_categories(self) -> List[str]:
        return self._distinct(Report.category)

    def get_departments(self) -> List[str]:
        return self._distinct(Report.assigned_department)

    def iter_csv(self, rows: List[ReportExportRow]) -> Iterator[str]:
        output = io.StringIO()
        # Header row bare; data rows quote every text value and leave ratings numeric.
        header_writer = csv.writer(output, lineterminator="\n")
        writer = csv.writer(output, lineterminator="\n", quoting=csv.QUOTE_NONNUMERIC)

        header_writer.writerow(CSV_HEADERS)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for row in rows:
            writer.writerow([
                row.id,
                row.title,
                row.description,
                row.category,
                row.status,
                row.priority,
                row.assigned_to,
                row.assigned_department,
                row.created_at,
                row.resolved_at or "",
                row.location,
                "" if row.rating is None else row.rating,
                row.feedback or "",
            ])
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    def to_csv(self, rows: List[ReportExportRow]) -> str:
        return "".join(self.iter_csv(rows))

    def to_html(self, rows: List[ReportExportRow], title: str = "Reports Export", generated_at: datetime = None) -> str:
        generated_at = generated_at or datetime.utcnow()
        head = "".join(f"<th>{escape(h)}</th>" for h in HTML_HEADERS)
        body = "".join(
            "<tr>" + "".join(f"<td>{escape(str(value))}</td>" for value in (
                row.id,
                row.title,
                row.category,
                row.status,
                row.priority,
                row.assigned_to,
                row.assigned_department,
                row.created_at,
                row.location,
                "N/A" if row.rating is None else row.rating,
            )) + "</tr>"
            for row in rows
        )
        return (
            "<!DOCTYPE html>\n"
            "<html>\n"
            f"<head><meta charset=\"utf-8\"><title>{escape(title)}</title><style>{HTML_STYLE}</style></head>\n"
            "<body>\n"
            f"<div class=\"header\"><h1>Reports Export</h1><div>Generated on: {format_date(generated_at)}</div></div>\n"
            f"<div class=\"summary\"><strong>Summary:</strong> {len(rows)} reports exported</div>\n"
            f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>\n"
            "</body>\n"
            "</html>\n"
        )

    def _distinct(self, column) -> List[str]:
        try:
            values = self.db.query(column).filter(column.isnot(None)).distinct().all()
        except SQLAlchemyError:
            logger.exception("Error fetching distinct %s values", column.key)
            return []
        return sorted(value for (value,) in values if value)
