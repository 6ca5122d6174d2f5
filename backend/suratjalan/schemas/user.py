from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from suratjalan.utils.permissions import UserRole


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: UserRole
    email: Optional[str] = None
    is_active: bool = True
    custom_menu_access: List[str] = []


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[UserRole] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None
    custom_menu_access: Optional[List[str]] = None


class UserResponse(BaseModel):
    id: str
    username: str
    name: str
    role: UserRole
    email: Optional[str] = None
    is_active: bool
    custom_menu_access: List[str] = []
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class MenuItemResponse(BaseModel):
    id: str
    title: str
    icon: str
    path: str
    description: str

    class Config:
        from_attributes = True


class PermissionsResponse(BaseModel):
    role: UserRole
    user_id: Optional[str] = None
    permissions: Dict[str, bool]
    menus: List[MenuItemResponse]
    custom_menu_access: bool = False


class RoleInfo(BaseModel):
    role: UserRole
    display_name: str
    description: str
    permissions: Dict[str, bool]
