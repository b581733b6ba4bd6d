from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from civicops.core.db import get_db
from civicops.schemas.user import User, UserCatalogs, UserStats, UserTypeEnum, UserUpdate
from civicops.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[User])
def get_users(user_type: Optional[UserTypeEnum] = Query(None, alias="userType"), db: Session = Depends(get_db)):
    """
    All users newest first, or one user type ordered by name.
    """
    service = UserService(db)
    if user_type is not None:
        return service.get_users_by_type(user_type)
    return service.get_all_users()


@router.get("/stats", response_model=UserStats)
def get_user_stats(db: Session = Depends(get_db)):
    return UserService(db).get_user_stats()


@router.get("/search", response_model=List[User])
def search_users(q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return UserService(db).search_users(q)


@router.get("/catalogs", response_model=UserCatalogs)
def get_catalogs():
    """
    Department and skill choices offered by the user form.
    """
    return UserCatalogs()


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = UserService(db).get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=User)
def update_user(user_id: str, update_data: UserUpdate, db: Session = Depends(get_db)):
    return UserService(db).update_user(user_id, update_data)


@router.delete("/{user_id}", response_model=User)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    """
    Soft delete: marks the user inactive. Rows are never removed.
    """
    return UserService(db).delete_user(user_id)


@router.post("/{user_id}/activate", response_model=User)
def activate_user(user_id: str, db: Session = Depends(get_db)):
    return UserService(db).activate_user(user_id)
