from pydantic import Field
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum

from civicops.schemas.report import CamelModel


class UserTypeEnum(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"
    RESIDENT = "RESIDENT"


USER_DEPARTMENTS = {
    "ROAD_MAINTENANCE": "Road Maintenance",
    "GARBAGE_COLLECTION": "Garbage Collection",
    "WATER_SERVICES": "Water Services",
    "ELECTRICAL": "Electrical",
    "PARKS_RECREATION": "Parks & Recreation",
    "TRAFFIC_MANAGEMENT": "Traffic Management",
    "CUSTOMER_SERVICE": "Customer Service",
    "ADMINISTRATION": "Administration",
    "OTHER": "Other",
}

USER_SKILLS = {
    "PLUMBING": "Plumbing",
    "ELECTRICAL_WORK": "Electrical Work",
    "ROAD_REPAIR": "Road Repair",
    "GARBAGE_COLLECTION": "Garbage Collection",
    "TREE_TRIMMING": "Tree Trimming",
    "CUSTOMER_SERVICE": "Customer Service",
    "DATA_ANALYSIS": "Data Analysis",
    "SUPERVISION": "Supervision",
    "HEAVY_MACHINERY": "Heavy Machinery",
    "PAINTING": "Painting",
    "WELDING": "Welding",
    "CARPENTRY": "Carpentry",
}


class User(CamelModel):
    id: str
    email: str
    full_name: str = ""
    user_type: str
    municipality_id: Optional[str] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True
    skills: List[str] = []
    current_workload: int = 0
    max_workload: int = 5
    profile_picture_url: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class Employee(CamelModel):
    id: str
    email: str
    full_name: str = ""
    user_type: str
    department: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool = True
    skills: List[str] = []
    current_workload: int = 0
    max_workload: int = 5
    created_at: datetime
    last_active_at: Optional[datetime] = None


class UserUpdate(CamelModel):
    full_name: Optional[str] = Field(None, min_length=1)
    user_type: Optional[UserTypeEnum] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
    skills: Optional[List[str]] = None
    max_workload: Optional[int] = Field(None, ge=0)
    profile_picture_url: Optional[str] = None


class UserStats(CamelModel):
    total: int
    by_type: Dict[str, int]
    active: int
    inactive: int


class UserCatalogs(CamelModel):
    departments: Dict[str, str] = USER_DEPARTMENTS
    skills: Dict[str, str] = USER_SKILLS


class WorkloadLevelEnum(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class AssignmentCandidate(Employee):
    workload_percentage: float
    workload_level: WorkloadLevelEnum
    workload_label: str
    workload_color: str


class AssignmentCandidates(CamelModel):
    report_id: str
    current_assignment: Optional[str] = None
    departments: List[str]
    candidates: List[AssignmentCandidate]
