from sqlalchemy import Column, String, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from suratjalan.database import Base
from suratjalan.models.delivery_note import _uuid, _utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String(20), nullable=False)  # administrator, supervisor, operator, driver
    email = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Menu ids; a non-empty list replaces the role's default menus
    custom_menu_access = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)
