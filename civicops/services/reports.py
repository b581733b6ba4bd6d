import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civicops.core.config import settings
from civicops.core.lifecycle import ReportLifecycle
from civicops.models.report import Report as ReportRow, Comment, StatusHistory
from civicops.models.user import User
from civicops.schemas.report import (
    Actor,
    CommentCreate,
    CommentResponse,
    Report,
    ReportCreate,
    ReportUpdate,
    StatusHistoryResponse,
)
from civicops.services.employees import EmployeeDirectory

logger = logging.getLogger(__name__)


def stored_values(data, **dump_options) -> dict:
    """
    Column values for a payload: top-level keys by attribute name,
    nested documents (suggestions, classifications) keyed by their camelCase field names.
    """
    dumped = data.model_dump(mode="json", by_alias=True, **dump_options)
    values = {}
    for name, field in type(data).model_fields.items():
        key = field.alias or name
        if key in dumped:
            values[name] = dumped[key]
    return values


def to_report(row: ReportRow) -> Report:
    """
    Typed view of a stored report, filling the defaults the dashboard expects
    for fields the intake pipeline may not have written yet.
    """
    return Report(
        id=row.id,
        user_id=row.user_id or "",
        municipality_id=row.municipality_id or "",
        title=row.title or "Untitled Report",
        description=row.description or "",
        issue_type=row.issue_type or "OTHER",
        category=row.category,
        image_urls=row.image_urls or [],
        location=row.location or {"latitude": 0, "longitude": 0},
        address=row.address or "",
        ai_confidence_score=row.ai_confidence_score or 0,
        ai_suggested_type=row.ai_suggested_type,
        ai_classification_completed=bool(row.ai_classification_completed),
        ml_confidence_score=row.ml_confidence_score or 0,
        ml_processing_status=row.ml_processing_status or "pending",
        ml_processing_completed_at=row.ml_processing_completed_at,
        ml_processing_error=row.ml_processing_error,
        ml_suggestions=row.ml_suggestions or [],
        image_classifications=row.image_classifications or [],
        text_analysis=row.text_analysis,
        status=row.status or "submitted",
        priority=row.priority or "medium",
        previous_priority=row.previous_priority,
        assigned_to=row.assigned_to,
        assigned_to_id=row.assigned_to_id,
        assigned_at=row.assigned_at,
        assigned_department=row.assigned_department,
        rating=row.rating,
        feedback=row.feedback,
        created_at=row.created_at or datetime.utcnow(),
        updated_at=row.updated_at or datetime.utcnow(),
        resolved_at=row.resolved_at,
    )


class ReportRepository:
    """
    Lifecycle operations over reports.

    Each public mutation is one transaction: the report update and its
    history/comment side effects are committed together or not at all.
    """

    def __init__(self, db: Session, maintain_workload: Optional[bool] = None):
        self.db = db
        self.lifecycle = ReportLifecycle(db)
        self.employees = EmployeeDirectory(db)
        if maintain_workload is None:
            maintain_workload = settings.MAINTAIN_WORKLOAD_COUNTERS
        self.maintain_workload = maintain_workload

    # Reads

    def get_all_reports(self) -> List[Report]:
        try:
            rows = self.db.query(ReportRow).order_by(ReportRow.created_at.desc(), ReportRow.id.asc()).all()
        except SQLAlchemyError:
            logger.error("Failed to fetch reports")
            raise
        return [to_report(row) for row in rows]

    def get_report_by_id(self, report_id: str) -> Optional[Report]:
        row = self._find(report_id)
        return to_report(row) if row is not None else None

    def get_reports_assigned_to(self, employee_id: str) -> List[Report]:
        try:
            rows = (
                self.db.query(ReportRow)
                .filter(ReportRow.assigned_to_id == employee_id)
                .order_by(ReportRow.created_at.desc(), ReportRow.id.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.error("Failed to fetch reports assigned to %s", employee_id)
            raise
        return [to_report(row) for row in rows]

    def get_comments(self, report_id: str) -> List[CommentResponse]:
        try:
            rows = (
                self.db.query(Comment)
                .filter(Comment.report_id == report_id)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.error("Failed to fetch comments for report %s", report_id)
            raise
        return [CommentResponse.model_validate(row) for row in rows]

    def get_status_history(self, report_id: str) -> List[StatusHistoryResponse]:
        try:
            rows = (
                self.db.query(StatusHistory)
                .filter(StatusHistory.report_id == report_id)
                .order_by(StatusHistory.timestamp.asc(), StatusHistory.id.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.error("Failed to fetch status history for report %s", report_id)
            raise
        return [StatusHistoryResponse.model_validate(row) for row in rows]

    # Writes

    def create_report(self, data: ReportCreate) -> Report:
        values = stored_values(data, exclude_none=True)
        now = datetime.utcnow()

        def write():
            row = ReportRow(**values, created_at=now, updated_at=now)
            self.db.add(row)
            return row

        row = self._commit(write, "create report")
        logger.info("Report %s created (issueType=%s)", row.id, row.issue_type)
        return to_report(row)

    def update_report(self, report_id: str, data: ReportUpdate) -> Report:
        values = stored_values(data, exclude_unset=True)

        def write():
            row = self._get_or_404(report_id)
            for field, value in values.items():
                setattr(row, field, value)
            row.updated_at = datetime.utcnow()
            return row

        row = self._commit(write, "update report")
        return to_report(row)

    def update_report_status(self, report_id: str, new_status: str, actor: Actor, notes: str = "") -> Report:
        def write():
            row = self._get_or_404(report_id)
            entry = self.lifecycle.change_status(row, new_status, actor=actor, notes=notes)
            logger.info(
                "Report %s status %s -> %s by %s", row.id, entry.old_status, entry.new_status, actor.email
            )
            return row

        return to_report(self._commit(write, "update report status"))

    def assign_report(self, report_id: str, employee_id: str, assigned_by: Actor, notes: str = "") -> Report:
        def write():
            row = self._get_or_404(report_id)
            employee = self.employees.get_employee_by_id(employee_id)
            if employee is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")

            if self.maintain_workload and row.assigned_to_id != employee.id:
                self._adjust_workload(row.assigned_to_id, -1)
                self._adjust_workload(employee.id, 1)

            self.lifecycle.assign(row, employee.id, employee.full_name, actor=assigned_by, notes=notes)
            logger.info("Report %s assigned to %s by %s", row.id, employee.id, assigned_by.email)
            return row

        return to_report(self._commit(write, "assign report"))

    def unassign_report(self, report_id: str, actor: Actor) -> Report:
        def write():
            row = self._get_or_404(report_id)
            if self.maintain_workload:
                self._adjust_workload(row.assigned_to_id, -1)
            self.lifecycle.unassign(row, actor=actor)
            logger.info("Report %s unassigned by %s", row.id, actor.email)
            return row

        return to_report(self._commit(write, "unassign report"))

    def add_comment(self, report_id: str, data: CommentCreate) -> CommentResponse:
        author = Actor(uid=data.user_id, email=data.user_email, user_type=data.user_type)

        def write():
            row = self._get_or_404(report_id)
            return self.lifecycle.comment(row, actor=author, content=data.content)

        comment = self._commit(write, "add comment")
        return CommentResponse.model_validate(comment)

    # Helpers

    def _find(self, report_id: str) -> Optional[ReportRow]:
        try:
            return self.db.get(ReportRow, report_id)
        except SQLAlchemyError:
            logger.error("Failed to fetch report %s", report_id)
            raise

    def _get_or_404(self, report_id: str) -> ReportRow:
        row = self._find(report_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
        return row

    def _adjust_workload(self, user_id: Optional[str], delta: int):
        if not user_id:
            return
        user = self.db.get(User, user_id)
        if user is None:
            return
        user.current_workload = max(0, (user.current_workload or 0) + delta)
        user.updated_at = datetime.utcnow()

    def _commit(self, write, action: str):
        try:
            result = write()
            self.db.commit()
            self.db.refresh(result)
            return result
        except HTTPException:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Store failure during %s", action)
            raise
        except Exception:
            self.db.rollback()
            raise
