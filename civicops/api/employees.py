from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from civicops.core.db import get_db
from civicops.schemas.user import Employee
from civicops.services.employees import EmployeeDirectory

router = APIRouter(prefix="/employees", tags=["Employees"])


@router.get("", response_model=List[Employee])
def get_active_employees(department: Optional[str] = None, db: Session = Depends(get_db)):
    """
    Active employees ordered by name, optionally restricted to one department.
    """
    return EmployeeDirectory(db).get_active_employees(department=department)


@router.get("/{employee_id}", response_model=Employee)
def get_employee(employee_id: str, db: Session = Depends(get_db)):
    """
    Only active employees resolve; deactivated staff return 404.
    """
    employee = EmployeeDirectory(db).get_employee_by_id(employee_id)
    if employee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee
