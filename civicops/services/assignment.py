import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from civicops.schemas.report import Actor, Report
from civicops.schemas.user import AssignmentCandidate, AssignmentCandidates, Employee, WorkloadLevelEnum
from civicops.services.employees import EmployeeDirectory
from civicops.services.reports import ReportRepository

logger = logging.getLogger(__name__)

ALL_DEPARTMENTS = "all"

# Display thresholds only; assignment is never refused on workload.
MODERATE_THRESHOLD = 60
HEAVY_THRESHOLD = 85

WORKLOAD_DISPLAY = {
    WorkloadLevelEnum.LIGHT: ("Light workload", "green"),
    WorkloadLevelEnum.MODERATE: ("Moderate workload", "yellow"),
    WorkloadLevelEnum.HEAVY: ("Heavy workload", "red"),
}


def workload_percentage(employee: Employee) -> float:
    if employee.max_workload <= 0:
        return 100.0
    return employee.current_workload / employee.max_workload * 100


def workload_level(employee: Employee) -> WorkloadLevelEnum:
    percentage = workload_percentage(employee)
    if percentage < MODERATE_THRESHOLD:
        return WorkloadLevelEnum.LIGHT
    if percentage < HEAVY_THRESHOLD:
        return WorkloadLevelEnum.MODERATE
    return WorkloadLevelEnum.HEAVY


def to_candidate(employee: Employee) -> AssignmentCandidate:
    level = workload_level(employee)
    label, color = WORKLOAD_DISPLAY[level]
    return AssignmentCandidate(
        **employee.model_dump(),
        workload_percentage=round(workload_percentage(employee), 1),
        workload_level=level,
        workload_label=label,
        workload_color=color,
    )


class AssignmentWorkflow:
    """
    Employee selection for one report.

    Holds only transient selection state (loaded employees, filters, chosen
    employee, notes); the assignment itself is delegated to ReportRepository.
    """

    def __init__(self, db: Session, repository: Optional[ReportRepository] = None):
        self.directory = EmployeeDirectory(db)
        self.repository = repository or ReportRepository(db)
        self.report: Optional[Report] = None
        self.employees: List[Employee] = []
        self.departments: List[str] = [ALL_DEPARTMENTS]
        self._reset_selection()

    def open(self, report_id: str) -> "AssignmentWorkflow":
        report = self.repository.get_report_by_id(report_id)
        if report is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")

        self.report = report
        self.employees = self.directory.get_active_employees()

        departments = []
        for employee in self.employees:
            if employee.department and employee.department not in departments:
                departments.append(employee.department)
        self.departments = [ALL_DEPARTMENTS] + departments
        self._reset_selection()
        return self

    def close(self):
        self.report = None
        self.employees = []
        self.departments = [ALL_DEPARTMENTS]
        self._reset_selection()

    def filter_candidates(self, search: str = "", department: str = ALL_DEPARTMENTS) -> List[Employee]:
        self.search = search or ""
        self.department = department or ALL_DEPARTMENTS

        filtered = self.employees
        if self.search:
            term = self.search.lower()
            filtered = [
                employee for employee in filtered
                if term in employee.full_name.lower()
                or term in employee.email.lower()
                or (employee.department and term in employee.department.lower())
            ]
        if self.department != ALL_DEPARTMENTS:
            filtered = [employee for employee in filtered if employee.department == self.department]
        return filtered

    def candidates(self, search: str = "", department: str = ALL_DEPARTMENTS) -> AssignmentCandidates:
        if self.report is None:
            raise RuntimeError("Assignment workflow has no open report")
        return AssignmentCandidates(
            report_id=self.report.id,
            current_assignment=self.report.assigned_to,
            departments=self.departments,
            candidates=[to_candidate(employee) for employee in self.filter_candidates(search, department)],
        )

    def select(self, employee_id: str, notes: str = ""):
        self.selected_employee_id = employee_id
        self.notes = notes or ""

    def confirm(self, actor: Actor, employee_id: Optional[str] = None, notes: Optional[str] = None) -> Report:
        """
        Assign the open report to the selected employee.
        On failure the error propagates and the selection is kept for a retry.
        """
        if self.report is None:
            raise RuntimeError("Assignment workflow has no open report")
        if employee_id is not None:
            self.select(employee_id, notes if notes is not None else self.notes)
        if not self.selected_employee_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No employee selected")

        report = self.repository.assign_report(
            self.report.id, self.selected_employee_id, assigned_by=actor, notes=self.notes
        )
        self.report = report
        self._reset_selection()
        return report

    def _reset_selection(self):
        self.selected_employee_id = ""
        self.notes = ""
        self.search = ""
        self.department = ALL_DEPARTMENTS
