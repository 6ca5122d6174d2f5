from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from suratjalan.database import get_db
from suratjalan.dependencies import require_permission
from suratjalan.schemas.user import MenuItemResponse, UserCreate, UserResponse, UserUpdate
from suratjalan.services import user_service
from suratjalan.utils.permissions import Capability

router = APIRouter(prefix="/api/users", tags=["users"])

can_manage_users = require_permission(Capability.MANAGE_USERS)
can_view = require_permission(Capability.VIEW_DASHBOARD)


@router.get("", response_model=List[UserResponse], dependencies=[Depends(can_manage_users)])
def list_users(db: Session = Depends(get_db)):
    """List all users"""
    return user_service.list_users(db)


@router.post("", response_model=UserResponse, dependencies=[Depends(can_manage_users)])
def create_user(user_data: UserCreate, db: Session = Depends(get_db)):
    return user_service.create_user(db, user_data)


@router.patch("/{user_id}", response_model=UserResponse, dependencies=[Depends(can_manage_users)])
def update_user(user_id: str, updates: UserUpdate, db: Session = Depends(get_db)):
    """Update a user, including the custom menu access list"""
    return user_service.update_user(db, user_id, updates)


@router.get("/{user_id}/menus", response_model=List[MenuItemResponse], dependencies=[Depends(can_view)])
def get_user_menus(user_id: str, db: Session = Depends(get_db)):
    """Menus visible to this user"""
    user = user_service.get_user(db, user_id)
    return [MenuItemResponse.model_validate(menu) for menu in user_service.user_menus(user)]
