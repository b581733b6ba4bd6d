from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON, Boolean
from civicops.core.db import Base
from civicops.models.report import new_document_id


class User(Base):
    """
    Staff or resident record. Created by the authentication subsystem.
    """
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=new_document_id)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column("fullName", String(255), nullable=True, index=True)
    user_type = Column("userType", String(20), nullable=False, default="RESIDENT", index=True)
    municipality_id = Column("municipalityId", String(64), nullable=True)
    phone_number = Column("phoneNumber", String(32), nullable=True)
    department = Column(String(100), nullable=True, index=True)
    skills = Column(JSON, nullable=True, default=list)
    is_active = Column("isActive", Boolean, nullable=True, default=True)
    current_workload = Column("currentWorkload", Integer, nullable=True, default=0)
    max_workload = Column("maxWorkload", Integer, nullable=True)
    profile_picture_url = Column("profilePictureUrl", String(512), nullable=True)
    created_at = Column("createdAt", DateTime, default=datetime.utcnow, index=True)
    updated_at = Column("updatedAt", DateTime, default=datetime.utcnow)
    last_login_at = Column("lastLoginAt", DateTime, nullable=True)
