"""
Shared service instances and request dependencies.

The caller's role comes from the ``X-User-Role`` header (and optionally
``X-User-Id``); verifying who sent it is left to the deployment in front of
this API.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from suratjalan.database import SessionLocal
from suratjalan.services.delivery_note_cache import DeliveryNoteCache
from suratjalan.services.reconciliation_service import ReconciliationService
from suratjalan.services.store_gateway import StoreGateway
from suratjalan.utils.permissions import Capability, UserRole, has_permission

# Singleton instances
store_gateway = StoreGateway(SessionLocal)
reconciliation_service = ReconciliationService(store_gateway)
delivery_note_cache = DeliveryNoteCache(store_gateway, reconciliation_service)


def get_gateway() -> StoreGateway:
    return store_gateway


def get_reconciliation_service() -> ReconciliationService:
    return reconciliation_service


async def get_note_cache() -> DeliveryNoteCache:
    await delivery_note_cache.ensure_loaded()
    return delivery_note_cache


def get_current_role(x_user_role: Optional[str] = Header(None)) -> UserRole:
    if not x_user_role:
        raise HTTPException(status_code=401, detail="Missing X-User-Role header")
    try:
        return UserRole(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role: {x_user_role}")


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    return x_user_id or None


def require_permission(capability: Capability):
    """Dependency factory: 403 unless the caller's role has ``capability``"""

    def _check(role: UserRole = Depends(get_current_role)) -> UserRole:
        if not has_permission(role, capability):
            raise HTTPException(
                status_code=403,
                detail=f"Role '{role.value}' is not allowed to {capability.value}",
            )
        return role

    return _check
