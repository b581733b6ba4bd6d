from typing import List
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from civicops.core.db import get_db
from civicops.schemas.report import (
    AssignmentRequest,
    CommentCreate,
    CommentResponse,
    Report,
    ReportCreate,
    ReportUpdate,
    StatusHistoryResponse,
    StatusUpdateRequest,
    UnassignmentRequest,
)
from civicops.schemas.user import AssignmentCandidates
from civicops.services.assignment import AssignmentWorkflow
from civicops.services.reports import ReportRepository

router = APIRouter(prefix="/reports", tags=["Reports"])


def _get_or_404(repository: ReportRepository, report_id: str) -> Report:
    report = repository.get_report_by_id(report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


@router.get("", response_model=List[Report])
def get_reports(db: Session = Depends(get_db)):
    """
    All reports, newest first. No pagination: the dashboard filters client-side.
    """
    return ReportRepository(db).get_all_reports()


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
def create_report(report_in: ReportCreate, db: Session = Depends(get_db)):
    """
    Store a report handed over by the intake pipeline.
    """
    return ReportRepository(db).create_report(report_in)


@router.get("/assigned/{employee_id}", response_model=List[Report])
def get_assigned_reports(employee_id: str, db: Session = Depends(get_db)):
    """
    Reports currently assigned to one employee (the "my assignments" view).
    """
    return ReportRepository(db).get_reports_assigned_to(employee_id)


@router.get("/{report_id}", response_model=Report)
def get_report(report_id: str, db: Session = Depends(get_db)):
    return _get_or_404(ReportRepository(db), report_id)


@router.patch("/{report_id}", response_model=Report)
def update_report(report_id: str, update_data: ReportUpdate, db: Session = Depends(get_db)):
    """
    Partially update descriptive fields on a report.
    Status and assignment changes MUST go through /status, /assign or /unassign so they are audited.
    """
    return ReportRepository(db).update_report(report_id, update_data)


@router.post("/{report_id}/status", response_model=Report)
def update_report_status(report_id: str, request: StatusUpdateRequest, db: Session = Depends(get_db)):
    """
    Change the status of a report and append a status history entry in the same transaction.
    """
    return ReportRepository(db).update_report_status(
        report_id, request.status.value, actor=request.actor, notes=request.notes
    )


@router.get("/{report_id}/assignment-candidates", response_model=AssignmentCandidates)
def get_assignment_candidates(
    report_id: str,
    search: str = Query("", description="Substring matched against name, email and department."),
    department: str = Query("all", description="Exact department, or 'all'."),
    db: Session = Depends(get_db),
):
    """
    Active employees eligible for the report, with their workload indicators.
    """
    return AssignmentWorkflow(db).open(report_id).candidates(search=search, department=department)


@router.post("/{report_id}/assign", response_model=Report)
def assign_report(report_id: str, request: AssignmentRequest, db: Session = Depends(get_db)):
    """
    Assign the report to an active employee, recording a history entry and an audit comment.
    Workload is shown to the caller but never blocks the assignment.
    """
    workflow = AssignmentWorkflow(db).open(report_id)
    return workflow.confirm(actor=request.actor, employee_id=request.employee_id, notes=request.notes)


@router.post("/{report_id}/unassign", response_model=Report)
def unassign_report(report_id: str, request: UnassignmentRequest, db: Session = Depends(get_db)):
    return ReportRepository(db).unassign_report(report_id, actor=request.actor)


@router.get("/{report_id}/comments", response_model=List[CommentResponse])
def get_comments(report_id: str, db: Session = Depends(get_db)):
    return ReportRepository(db).get_comments(report_id)


@router.post("/{report_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(report_id: str, comment_in: CommentCreate, db: Session = Depends(get_db)):
    return ReportRepository(db).add_comment(report_id, comment_in)


@router.get("/{report_id}/history", response_model=List[StatusHistoryResponse])
def get_status_history(report_id: str, db: Session = Depends(get_db)):
    """
    Immutable audit entries for a report, oldest first.
    """
    return ReportRepository(db).get_status_history(report_id)
