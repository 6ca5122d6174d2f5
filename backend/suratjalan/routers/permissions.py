from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from suratjalan.database import get_db
from suratjalan.dependencies import get_current_role, get_current_user_id
from suratjalan.models.user import User
from suratjalan.schemas.user import MenuItemResponse, PermissionsResponse, RoleInfo
from suratjalan.utils.permissions import (
    ROLE_DESCRIPTIONS,
    ROLE_DISPLAY_NAMES,
    RoleDefault,
    UserRole,
    can_access_route,
    menu_access_for,
    permissions_for,
    resolve_user_menus,
)

router = APIRouter(prefix="/api/permissions", tags=["permissions"])


@router.get("/me", response_model=PermissionsResponse)
def get_my_permissions(
    role: UserRole = Depends(get_current_role),
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Capabilities and visible menus for the calling role (and user, if given)"""
    access = RoleDefault()
    if user_id:
        user = db.query(User).filter(User.id == user_id).first()
        if user:
            access = menu_access_for(user.custom_menu_access)

    menus = resolve_user_menus(role, access)
    return PermissionsResponse(
        role=role,
        user_id=user_id,
        permissions=permissions_for(role),
        menus=[MenuItemResponse.model_validate(menu) for menu in menus],
        custom_menu_access=not isinstance(access, RoleDefault) and role is not UserRole.ADMINISTRATOR,
    )


@router.get("/route")
def check_route_access(
    path: str = Query(..., description="Route path, e.g. /purchase-orders"),
    role: UserRole = Depends(get_current_role),
):
    return {"role": role.value, "path": path, "allowed": can_access_route(role, path)}


@router.get("/roles", response_model=List[RoleInfo])
def list_roles():
    """Role display names, descriptions and capability tables"""
    return [
        RoleInfo(
            role=role,
            display_name=ROLE_DISPLAY_NAMES[role],
            description=ROLE_DESCRIPTIONS[role],
            permissions=permissions_for(role),
        )
        for role in UserRole
    ]
