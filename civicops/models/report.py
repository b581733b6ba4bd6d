import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, JSON, Boolean
from civicops.core.db import Base


def new_document_id() -> str:
    return uuid.uuid4().hex


class Report(Base):
    """
    A citizen-submitted service issue.
    Column names are the document field names consumed by the dashboard.
    """
    __tablename__ = "reports"

    id = Column(String(64), primary_key=True, default=new_document_id)
    user_id = Column("userId", String(64), nullable=True, index=True)
    municipality_id = Column("municipalityId", String(64), nullable=True)

    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    issue_type = Column("issueType", String(50), nullable=True)
    category = Column(String(100), nullable=True, index=True)
    image_urls = Column("imageURLs", JSON, nullable=True, default=list)
    location = Column(JSON, nullable=True)
    address = Column(String(512), nullable=True)

    # Classification metadata written by the intake pipeline
    ai_confidence_score = Column("aiConfidenceScore", Float, nullable=True)
    ai_suggested_type = Column("aiSuggestedType", String(50), nullable=True)
    ai_classification_completed = Column("aiClassificationCompleted", Boolean, nullable=True)
    ml_confidence_score = Column("mlConfidenceScore", Float, nullable=True)
    ml_processing_status = Column("mlProcessingStatus", String(20), nullable=True)
    ml_processing_completed_at = Column("mlProcessingCompletedAt", DateTime, nullable=True)
    ml_processing_error = Column("mlProcessingError", Text, nullable=True)
    ml_suggestions = Column("mlSuggestions", JSON, nullable=True, default=list)
    image_classifications = Column("imageClassifications", JSON, nullable=True, default=list)
    text_analysis = Column("textAnalysis", JSON, nullable=True)

    status = Column(String(50), nullable=True, default="submitted", index=True)
    priority = Column(String(20), nullable=True, default="medium")
    previous_priority = Column("previousPriority", String(20), nullable=True)
    assigned_to = Column("assignedTo", String(255), nullable=True)
    assigned_to_id = Column("assignedToId", String(64), nullable=True, index=True)
    assigned_at = Column("assignedAt", DateTime, nullable=True)
    assigned_department = Column("assignedDepartment", String(100), nullable=True)

    rating = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)

    created_at = Column("createdAt", DateTime, default=datetime.utcnow, index=True)
    updated_at = Column("updatedAt", DateTime, default=datetime.utcnow)
    resolved_at = Column("resolvedAt", DateTime, nullable=True)


class Comment(Base):
    """
    Append-only note attached to a report.
    """
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column("reportId", String(64), ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column("userId", String(64), nullable=False)
    user_email = Column("userEmail", String(255), nullable=False)
    user_type = Column("userType", String(20), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column("createdAt", DateTime, default=datetime.utcnow, index=True)
    updated_at = Column("updatedAt", DateTime, default=datetime.utcnow)


class StatusHistory(Base):
    """
    Immutable audit entry written alongside every status or assignment change.
    """
    __tablename__ = "statusHistory"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column("reportId", String(64), ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    old_status = Column("oldStatus", String(50), nullable=False, default="")
    new_status = Column("newStatus", String(50), nullable=False)
    changed_by = Column("changedBy", String(64), nullable=False)
    changed_by_user = Column("changedByUser", String(255), nullable=False)
    notes = Column(Text, nullable=False, default="")
    event_type = Column("eventType", String(20), nullable=False, default="status_change")
    automatic = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime, default=datetime.utcnow, index=True)
