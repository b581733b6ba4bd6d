import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civicops.core.config import settings
from civicops.models.user import User
from civicops.schemas.user import Employee, UserTypeEnum

logger = logging.getLogger(__name__)


def to_employee(row: User) -> Employee:
    return Employee(
        id=row.id,
        email=row.email,
        full_name=row.full_name or "",
        user_type=row.user_type,
        department=row.department,
        phone_number=row.phone_number,
        is_active=row.is_active is not False,
        skills=row.skills or [],
        current_workload=row.current_workload or 0,
        max_workload=row.max_workload if row.max_workload is not None else settings.DEFAULT_MAX_WORKLOAD,
        created_at=row.created_at,
        last_active_at=row.last_login_at,
    )


class EmployeeDirectory:
    """
    Read-only view of the staff who can receive assignments.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_active_employees(self, department: Optional[str] = None) -> List[Employee]:
        """
        Active employees ordered by full name, optionally narrowed to one department.
        """
        query = self.db.query(User).filter(
            User.user_type == UserTypeEnum.EMPLOYEE.value,
            User.is_active.is_(True),
        )
        if department is not None:
            query = query.filter(User.department == department)

        try:
            rows = query.order_by(User.full_name.asc(), User.id.asc()).all()
        except SQLAlchemyError:
            logger.error("Failed to fetch active employees (department=%s)", department)
            raise
        return [to_employee(row) for row in rows]

    def get_employees_by_department(self, department: str) -> List[Employee]:
        return self.get_active_employees(department=department)

    def get_employee_by_id(self, employee_id: str) -> Optional[Employee]:
        """
        Looks the id up in the active-employee list rather than reading the row directly,
        so inactive staff and non-employees resolve to None.
        """
        for employee in self.get_active_employees():
            if employee.id == employee_id:
                return employee
        return None
