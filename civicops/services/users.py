import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civicops.core.config import settings
from civicops.models.user import User as UserRow
from civicops.schemas.user import User, UserStats, UserTypeEnum, UserUpdate

logger = logging.getLogger(__name__)


def to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        full_name=row.full_name or "",
        user_type=row.user_type,
        municipality_id=row.municipality_id,
        phone_number=row.phone_number,
        department=row.department,
        is_active=row.is_active is not False,
        skills=row.skills or [],
        current_workload=row.current_workload or 0,
        max_workload=row.max_workload if row.max_workload is not None else settings.DEFAULT_MAX_WORKLOAD,
        profile_picture_url=row.profile_picture_url,
        created_at=row.created_at or datetime.utcnow(),
        last_login_at=row.last_login_at,
    )


class UserService:
    """
    Staff administration. Accounts are created by the authentication
    subsystem; here they are listed, edited and (soft) deleted.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_all_users(self) -> List[User]:
        try:
            rows = self.db.query(UserRow).order_by(UserRow.created_at.desc(), UserRow.id.asc()).all()
        except SQLAlchemyError:
            logger.error("Failed to fetch users")
            raise
        return [to_user(row) for row in rows]

    def get_users_by_type(self, user_type: UserTypeEnum) -> List[User]:
        rows = (
            self.db.query(UserRow)
            .filter(UserRow.user_type == UserTypeEnum(user_type).value)
            .order_by(UserRow.full_name.asc(), UserRow.id.asc())
            .all()
        )
        return [to_user(row) for row in rows]

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        row = self.db.get(UserRow, user_id)
        return to_user(row) if row is not None else None

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        values = data.model_dump(mode="json", exclude_unset=True)
        return self._update(user_id, values, "update user")

    def delete_user(self, user_id: str) -> User:
        """
        Soft delete: the account is deactivated, never removed.
        """
        return self._update(user_id, {"is_active": False}, "deactivate user")

    def activate_user(self, user_id: str) -> User:
        return self._update(user_id, {"is_active": True}, "activate user")

    def get_user_stats(self) -> UserStats:
        users = self.get_all_users()
        return UserStats(
            total=len(users),
            by_type={t.value: sum(1 for u in users if u.user_type == t.value) for t in UserTypeEnum},
            active=sum(1 for u in users if u.is_active),
            inactive=sum(1 for u in users if not u.is_active),
        )

    def search_users(self, term: str) -> List[User]:
        needle = (term or "").lower()
        return [
            user for user in self.get_all_users()
            if needle in user.full_name.lower()
            or needle in user.email.lower()
            or (user.department and needle in user.department.lower())
            or (user.phone_number and term in user.phone_number)
        ]

    def _update(self, user_id: str, values: dict, action: str) -> User:
        row = self.db.get(UserRow, user_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        try:
            for field, value in values.items():
                setattr(row, field, value)
            row.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Store failure during %s (%s)", action, user_id)
            raise
        logger.info("User %s: %s", user_id, action)
        return to_user(row)
