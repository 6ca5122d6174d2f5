from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from typing import List, Optional

from suratjalan.database import get_db
from suratjalan.dependencies import get_reconciliation_service, require_permission
from suratjalan.exceptions import NotFoundError
from suratjalan.schemas.purchase_order import (
    POBalance,
    POStatus,
    PurchaseOrderCreate,
    PurchaseOrderDetailResponse,
    PurchaseOrderResponse,
    PurchaseOrderUpdate,
)
from suratjalan.services import purchase_order_service
from suratjalan.services.reconciliation_service import ReconciliationService
from suratjalan.utils.permissions import Capability

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])

can_view = require_permission(Capability.VIEW_DASHBOARD)
can_manage = require_permission(Capability.MANAGE_PURCHASE_ORDERS)


@router.get("", response_model=List[PurchaseOrderResponse], dependencies=[Depends(can_view)])
def list_purchase_orders(
    status: Optional[POStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
):
    """List all purchase orders, newest first"""
    return purchase_order_service.list_purchase_orders(db, status.value if status else None)


@router.get("/{po_number}", response_model=PurchaseOrderDetailResponse, dependencies=[Depends(can_view)])
def get_purchase_order(po_number: str, db: Session = Depends(get_db)):
    """Get purchase order details by PO number, with its delivery notes"""
    return purchase_order_service.get_purchase_order(db, po_number)


@router.post("", response_model=PurchaseOrderResponse, dependencies=[Depends(can_manage)])
def create_purchase_order(po_data: PurchaseOrderCreate, db: Session = Depends(get_db)):
    """Create a new purchase order"""
    return purchase_order_service.create_purchase_order(db, po_data)


@router.patch("/{po_number}", response_model=PurchaseOrderResponse, dependencies=[Depends(can_manage)])
def update_purchase_order(po_number: str, updates: PurchaseOrderUpdate, db: Session = Depends(get_db)):
    return purchase_order_service.update_purchase_order(db, po_number, updates)


@router.delete("/{po_number}", dependencies=[Depends(can_manage)])
def delete_purchase_order(po_number: str, db: Session = Depends(get_db)):
    purchase_order_service.delete_purchase_order(db, po_number)
    return {"deleted": True, "po_number": po_number}


@router.post("/{po_number}/reconcile", response_model=POBalance, dependencies=[Depends(can_manage)])
async def reconcile_purchase_order(
    po_number: str,
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
):
    """Recompute shipped/remaining tonnage and status from the linked delivery notes"""
    balance = await run_in_threadpool(reconciliation.recompute_po_balance, po_number)
    if balance is None:
        raise NotFoundError("Purchase order", po_number)
    return balance
