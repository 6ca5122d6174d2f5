import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from suratjalan.database import commit_or_raise
from suratjalan.exceptions import NotFoundError, ValidationError
from suratjalan.models.delivery_note import DeliveryNote
from suratjalan.models.purchase_order import PurchaseOrder
from suratjalan.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderDetailResponse,
    PurchaseOrderResponse,
    PurchaseOrderUpdate,
)
from suratjalan.services.store_gateway import row_to_delivery_note
from suratjalan.utils.tonnage_rules import compute_po_balance

logger = logging.getLogger(__name__)


def compute_total_value(total_tonnage: float, price_per_ton: Decimal) -> Decimal:
    return (Decimal(str(total_tonnage)) * Decimal(str(price_per_ton))).quantize(Decimal("0.01"))


def list_purchase_orders(db: Session, status: Optional[str] = None) -> List[PurchaseOrderResponse]:
    query = db.query(PurchaseOrder)
    if status:
        query = query.filter(PurchaseOrder.status == status)
    pos = query.order_by(PurchaseOrder.created_at.desc()).all()
    return [PurchaseOrderResponse.model_validate(po) for po in pos]


def _get_po_row(db: Session, po_number: str) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.po_number == po_number).first()
    if not po:
        raise NotFoundError("Purchase order", po_number)
    return po


def get_purchase_order(db: Session, po_number: str) -> PurchaseOrderDetailResponse:
    """PO details together with the delivery notes shipped against it"""
    po = _get_po_row(db, po_number)
    deliveries = (
        db.query(DeliveryNote)
        .filter(DeliveryNote.po_number == po_number)
        .order_by(DeliveryNote.date.desc())
        .all()
    )
    return PurchaseOrderDetailResponse(
        **PurchaseOrderResponse.model_validate(po).model_dump(),
        deliveries=[row_to_delivery_note(note) for note in deliveries],
    )


def create_purchase_order(db: Session, po_data: PurchaseOrderCreate) -> PurchaseOrderResponse:
    """Create a PO; nothing is shipped yet so the full tonnage remains."""
    existing = db.query(PurchaseOrder).filter(PurchaseOrder.po_number == po_data.po_number).first()
    if existing:
        raise ValidationError(f"Purchase order with number {po_data.po_number} already exists", field="po_number")

    remaining, status = compute_po_balance(po_data.total_tonnage, 0)
    po = PurchaseOrder(
        **po_data.model_dump(),
        total_value=compute_total_value(po_data.total_tonnage, po_data.price_per_ton),
        shipped_tonnage=0,
        remaining_tonnage=remaining,
        status=status.value,
    )
    db.add(po)
    commit_or_raise(db, "create_purchase_order")
    db.refresh(po)

    logger.info(f"Created purchase order {po.po_number} for {po.total_tonnage} tons")
    return PurchaseOrderResponse.model_validate(po)


def update_purchase_order(db: Session, po_number: str, updates: PurchaseOrderUpdate) -> PurchaseOrderResponse:
    """
    Apply a partial update.

    total_value follows total_tonnage and price_per_ton. A tonnage change
    re-derives remaining tonnage and status from the stored shipped tonnage,
    unless the caller sets the status explicitly.
    """
    po = _get_po_row(db, po_number)
    changes = updates.model_dump(exclude_unset=True)
    if "status" in changes and changes["status"] is not None:
        changes["status"] = changes["status"].value

    for key, value in changes.items():
        setattr(po, key, value)

    if "total_tonnage" in changes or "price_per_ton" in changes:
        po.total_value = compute_total_value(po.total_tonnage, po.price_per_ton)
    if "total_tonnage" in changes:
        remaining, status = compute_po_balance(po.total_tonnage, po.shipped_tonnage or 0)
        po.remaining_tonnage = remaining
        if "status" not in changes:
            po.status = status.value

    commit_or_raise(db, "update_purchase_order")
    db.refresh(po)
    return PurchaseOrderResponse.model_validate(po)


def delete_purchase_order(db: Session, po_number: str) -> bool:
    """Delete a PO. Delivery notes keep their PO number; there is no FK."""
    po = _get_po_row(db, po_number)
    linked = db.query(DeliveryNote).filter(DeliveryNote.po_number == po_number).count()
    db.delete(po)
    commit_or_raise(db, "delete_purchase_order")
    if linked:
        logger.warning(f"Deleted purchase order {po_number} still referenced by {linked} delivery notes")
    else:
        logger.info(f"Deleted purchase order {po_number}")
    return True
