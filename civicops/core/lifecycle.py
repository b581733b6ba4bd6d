from typing import Optional
from sqlalchemy.orm import Session
from civicops.models.report import Report, Comment, StatusHistory
from civicops.schemas.report import Actor
from datetime import datetime

class ReportStatus:
    SUBMITTED = "submitted"
    AI_PROCESSED = "ai_processed"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    ASSIGNED = "ASSIGNED"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REJECTED = "rejected"
    VERIFICATION_NEEDED = "verification_needed"

RESOLVED_STATUSES = (ReportStatus.RESOLVED, ReportStatus.CLOSED)

PENDING_STATUSES = (
    ReportStatus.ASSIGNED,
    ReportStatus.IN_PROGRESS,
    ReportStatus.UNDER_REVIEW,
    ReportStatus.AI_PROCESSED,
    ReportStatus.VERIFICATION_NEEDED,
)

class HistoryEvent:
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    UNASSIGNMENT = "unassignment"

class ReportLifecycle:
    """
    Applies status and assignment changes to a report together with their audit trail.

    Every method stages its writes on the session and returns. Nothing is committed here:
    the caller commits once, so a report never changes without its history entry.
    No transition graph is enforced; status values are validated by the API layer.
    """

    def __init__(self, db: Session):
        self.db = db

    def change_status(self, report: Report, new_status: str, actor: Actor, notes: str = "", automatic: bool = False) -> StatusHistory:
        previous_status = report.status or ReportStatus.SUBMITTED
        now = datetime.utcnow()

        report.status = new_status
        report.updated_at = now
        if new_status in RESOLVED_STATUSES and report.resolved_at is None:
            report.resolved_at = now

        return self._record(
            report,
            old_status=previous_status,
            new_status=new_status,
            actor=actor,
            notes=notes,
            event_type=HistoryEvent.STATUS_CHANGE,
            automatic=automatic,
            timestamp=now,
        )

    def assign(self, report: Report, employee_id: str, employee_name: str, actor: Actor, notes: str = "") -> StatusHistory:
        now = datetime.utcnow()

        report.assigned_to = employee_name
        report.assigned_to_id = employee_id
        report.assigned_at = now
        report.updated_at = now

        # Assignment does not move the status; the entry records it unchanged.
        current_status = report.status or ReportStatus.SUBMITTED
        entry = self._record(
            report,
            old_status=current_status,
            new_status=current_status,
            actor=actor,
            notes=f"Assigned to {employee_name}" + (f": {notes}" if notes else ""),
            event_type=HistoryEvent.ASSIGNMENT,
            timestamp=now,
        )
        self.comment(
            report,
            actor=actor,
            content=f"📋 Report assigned to {employee_name}" + (f"\n\n**Notes:** {notes}" if notes else ""),
            timestamp=now,
        )
        return entry

    def unassign(self, report: Report, actor: Actor) -> StatusHistory:
        now = datetime.utcnow()

        report.assigned_to = None
        report.assigned_to_id = None
        report.assigned_at = None
        report.updated_at = now

        current_status = report.status or ReportStatus.SUBMITTED
        entry = self._record(
            report,
            old_status=current_status,
            new_status=current_status,
            actor=actor,
            notes="Report unassigned",
            event_type=HistoryEvent.UNASSIGNMENT,
            timestamp=now,
        )
        self.comment(report, actor=actor, content="📋 Report unassigned from previous employee", timestamp=now)
        return entry

    def comment(self, report: Report, actor: Actor, content: str, timestamp: Optional[datetime] = None) -> Comment:
        now = timestamp or datetime.utcnow()
        entry = Comment(
            report_id=report.id,
            user_id=actor.uid,
            user_email=actor.email,
            user_type=actor.user_type,
            content=content,
            created_at=now,
            updated_at=now,
        )
        report.updated_at = now
        self.db.add(entry)
        return entry

    def _record(self, report: Report, old_status: str, new_status: str, actor: Actor, notes: str, event_type: str, automatic: bool = False, timestamp: Optional[datetime] = None) -> StatusHistory:
        entry = StatusHistory(
            report_id=report.id,
            old_status=old_status,
            new_status=new_status,
            changed_by=actor.uid,
            changed_by_user=actor.email,
            notes=notes or "",
            event_type=event_type,
            automatic=automatic,
            timestamp=timestamp or datetime.utcnow(),
        )
        self.db.add(entry)
        return entry
