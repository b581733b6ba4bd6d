from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class CamelModel(BaseModel):
    """
    Base for every payload exchanged with the dashboard.
    Fields are declared in snake_case and travel as camelCase.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ReportStatusEnum(str, Enum):
    SUBMITTED = "submitted"
    AI_PROCESSED = "ai_processed"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REJECTED = "rejected"
    VERIFICATION_NEEDED = "verification_needed"
    ASSIGNED = "ASSIGNED"


class PriorityEnum(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IssueTypeEnum(str, Enum):
    POTHOLE = "pothole"
    WATER_LEAK = "water_leak"
    GARBAGE = "garbage"
    STREET_LIGHT = "street_light"
    TRAFFIC_SIGNAL = "traffic_signal"
    DRAINAGE = "drainage"
    VEGETATION = "vegetation"
    OTHER = "other"


class MLProcessingStatusEnum(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class HistoryEventEnum(str, Enum):
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    UNASSIGNMENT = "unassignment"


class Location(CamelModel):
    latitude: float = 0
    longitude: float = 0
    geohash: Optional[str] = None


class ImagePrediction(CamelModel):
    label: str
    confidence: float


class ImageClassification(CamelModel):
    image_url: Optional[str] = Field(None, alias="imageURL")
    image_index: Optional[int] = None
    label: str
    confidence: float
    model_version: Optional[str] = None
    processing_time: Optional[float] = None
    timestamp: Optional[Any] = None
    all_predictions: List[ImagePrediction] = []
    fallback: Optional[bool] = None
    error: Optional[str] = None


class MLSuggestion(CamelModel):
    type: str = Field(..., description="ISSUE_TYPE_CORRECTION or PRIORITY_ADJUSTMENT.")
    field: str
    current: Optional[Any] = None
    suggested: Optional[Any] = None
    confidence: float = 0
    reason: str = ""
    source: Optional[str] = None


class TextAnalysis(CamelModel):
    model_config = ConfigDict(extra="allow")

    sentiment: Optional[Dict[str, Any]] = None
    category_suggestion: Optional[Dict[str, Any]] = None
    priority_suggestion: Optional[Dict[str, Any]] = None
    keywords: List[str] = []
    entities: Optional[Dict[str, Any]] = None
    confidence: Optional[float] = None


class Actor(CamelModel):
    uid: str = Field(..., description="ID of the staff member performing the action.")
    email: str = Field(..., description="Email recorded in the audit trail.")
    user_type: str = Field(..., description="ADMIN, EMPLOYEE or RESIDENT.")


class Report(CamelModel):
    id: str
    user_id: str = ""
    municipality_id: str = ""
    title: str = "Untitled Report"
    description: str = ""
    issue_type: str = "OTHER"
    category: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list, alias="imageURLs")
    location: Location = Field(default_factory=Location)
    address: str = ""
    ai_confidence_score: float = 0
    ai_suggested_type: Optional[str] = None
    ai_classification_completed: bool = False
    ml_confidence_score: float = 0
    ml_processing_status: str = MLProcessingStatusEnum.PENDING.value
    ml_processing_completed_at: Optional[datetime] = None
    ml_processing_error: Optional[str] = None
    ml_suggestions: List[MLSuggestion] = []
    image_classifications: List[ImageClassification] = []
    text_analysis: Optional[TextAnalysis] = None
    status: str = ReportStatusEnum.SUBMITTED.value
    priority: str = PriorityEnum.MEDIUM.value
    previous_priority: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_to_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    assigned_department: Optional[str] = None
    rating: Optional[float] = None
    feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None


class ReportCreate(CamelModel):
    user_id: Optional[str] = None
    municipality_id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    issue_type: IssueTypeEnum = IssueTypeEnum.OTHER
    category: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list, alias="imageURLs")
    location: Optional[Location] = None
    address: Optional[str] = None
    priority: PriorityEnum = PriorityEnum.MEDIUM
    status: ReportStatusEnum = ReportStatusEnum.SUBMITTED
    ai_confidence_score: Optional[float] = None
    ml_confidence_score: Optional[float] = None
    ml_processing_status: Optional[MLProcessingStatusEnum] = None
    ml_suggestions: Optional[List[MLSuggestion]] = None
    image_classifications: Optional[List[ImageClassification]] = None
    text_analysis: Optional[TextAnalysis] = None
    assigned_department: Optional[str] = None


class ReportUpdate(CamelModel):
    """
    Partial update of descriptive fields.
    Status and assignment changes go through their own operations so they are audited.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    issue_type: Optional[IssueTypeEnum] = None
    category: Optional[str] = None
    address: Optional[str] = None
    location: Optional[Location] = None
    priority: Optional[PriorityEnum] = None
    assigned_department: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    feedback: Optional[str] = None


class StatusUpdateRequest(CamelModel):
    status: ReportStatusEnum = Field(..., description="The target status for the report.")
    actor: Actor
    notes: str = ""


class AssignmentRequest(CamelModel):
    employee_id: str = Field(..., description="ID of the active employee to assign.")
    actor: Actor
    notes: str = ""


class UnassignmentRequest(CamelModel):
    actor: Actor


class CommentCreate(CamelModel):
    user_id: str
    user_email: str
    user_type: str
    content: str = Field(..., min_length=1)


class CommentResponse(CamelModel):
    id: int
    report_id: str
    user_id: str
    user_email: str
    user_type: str
    content: str
    created_at: datetime
    updated_at: datetime


class StatusHistoryResponse(CamelModel):
    id: int
    report_id: str
    old_status: str = Field("", description="Status before the change. Equal to new_status for assignment events.")
    new_status: str
    changed_by: str
    changed_by_user: str
    notes: str = ""
    event_type: HistoryEventEnum = HistoryEventEnum.STATUS_CHANGE
    automatic: bool = False
    timestamp: datetime
