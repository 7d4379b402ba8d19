#synergysphere/api/user.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from synergysphere.schemas.user import UserRead, UserProfileUpdate, PasswordChange
from synergysphere.schemas.response import MessageResponse
from synergysphere.crud.user import get_user, list_users, update_profile, change_password
from synergysphere.dependencies import get_db, get_current_user
from synergysphere.models.user import User as DBUser

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("", response_model=List[UserRead])
def read_users(
    search: Optional[str] = Query(None, description="Поиск по имени или email"),
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    """
    Список пользователей (для добавления в проект).
    """
    return list_users(db, search=search)

@router.put("/profile", response_model=UserRead)
def update_my_profile(
    data: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    return update_profile(db, current_user, data.model_dump(exclude_unset=True))

@router.put("/password", response_model=MessageResponse)
def update_my_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    """
    Смена пароля; все refresh-токены пользователя перестают действовать.
    """
    change_password(db, current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password updated successfully")

@router.get("/{user_id}", response_model=UserRead)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: DBUser = Depends(get_current_user),
):
    return get_user(db, user_id)
