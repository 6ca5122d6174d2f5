import logging
from typing import List

from sqlalchemy.orm import Session

from suratjalan.exceptions import NotFoundError, ValidationError
from suratjalan.models.user import User
from suratjalan.schemas.user import UserCreate, UserUpdate
from suratjalan.database import commit_or_raise
from suratjalan.utils.permissions import MENU_IDS, MenuItem, menu_access_for, resolve_user_menus

logger = logging.getLogger(__name__)


def _check_menu_ids(menu_ids: List[str]) -> List[str]:
    unknown = sorted(set(menu_ids) - MENU_IDS)
    if unknown:
        raise ValidationError(f"Unknown menu ids: {', '.join(unknown)}", field="custom_menu_access")
    # Keep caller order, drop duplicates
    return list(dict.fromkeys(menu_ids))


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.asc()).all()


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    return user


def create_user(db: Session, user_data: UserCreate) -> User:
    if db.query(User).filter(User.username == user_data.username).first():
        raise ValidationError(f"Username {user_data.username} already exists", field="username")

    values = user_data.model_dump()
    values["role"] = user_data.role.value
    values["custom_menu_access"] = _check_menu_ids(user_data.custom_menu_access)
    user = User(**values)
    db.add(user)
    commit_or_raise(db, "create_user")
    db.refresh(user)
    logger.info(f"Created user {user.username} with role {user.role}")
    return user


def update_user(db: Session, user_id: str, updates: UserUpdate) -> User:
    user = get_user(db, user_id)
    changes = updates.model_dump(exclude_unset=True)

    new_username = changes.get("username")
    if new_username and new_username != user.username:
        if db.query(User).filter(User.username == new_username).first():
            raise ValidationError(f"Username {new_username} already exists", field="username")
    if changes.get("role") is not None:
        changes["role"] = changes["role"].value
    if "custom_menu_access" in changes:
        changes["custom_menu_access"] = _check_menu_ids(changes["custom_menu_access"] or [])

    for key, value in changes.items():
        setattr(user, key, value)
    commit_or_raise(db, "update_user")
    db.refresh(user)
    return user


def user_menus(user: User) -> List[MenuItem]:
    """Menus for a stored user: admin sees all, a custom list replaces the role default."""
    return resolve_user_menus(user.role, menu_access_for(user.custom_menu_access))
