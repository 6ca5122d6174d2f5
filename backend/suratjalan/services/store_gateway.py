"""
Store Gateway - translates between delivery note / purchase order entities and
their database rows, and performs the create/read/update/delete calls.

Every call opens its own session, so the gateway can be used from the
request thread or from the threadpool. SQLAlchemy failures are logged and
re-raised as PersistenceError; NotFoundError passes through untouched.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from suratjalan.config import settings
from suratjalan.exceptions import NotFoundError, PersistenceError
from suratjalan.models.delivery_note import DeliveryNote
from suratjalan.models.purchase_order import PurchaseOrder
from suratjalan.schemas.delivery_note import (
    DeliveryNoteCreate,
    DeliveryNoteResponse,
    DeliveryStatus,
    normalize_po_number,
)
from suratjalan.schemas.purchase_order import PurchaseOrderSummary

logger = logging.getLogger(__name__)


def row_to_delivery_note(row: DeliveryNote) -> DeliveryNoteResponse:
    """Database row -> application entity"""
    return DeliveryNoteResponse(
        id=row.id,
        date=row.date,
        vehicle_plate=row.vehicle_plate,
        driver_name=row.driver_name,
        delivery_note_number=row.delivery_note_number,
        destination=row.destination,
        po_number=row.po_number or None,
        net_weight=row.net_weight or None,
        status=row.status,
        notes=row.notes or None,
        has_seal=bool(row.has_seal),
        seal_numbers=list(row.seal_numbers or []),
        company=row.company or settings.default_company,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def delivery_note_to_row(data: dict) -> dict:
    """Application field values -> column values (partial dicts allowed)"""
    row = {}
    for key, value in data.items():
        if key == "po_number":
            value = normalize_po_number(value)
        elif key == "net_weight":
            value = value or None
        elif key == "notes":
            value = value or None
        elif key == "seal_numbers":
            value = list(value or [])
        elif key == "company":
            value = getattr(value, "value", value) or settings.default_company
        elif key == "status" and value is not None:
            value = getattr(value, "value", value)
        row[key] = value
    return row


class StoreGateway:
    """Persistence operations for delivery notes and purchase order balances"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        except NotFoundError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Store operation '{operation}' failed: {str(e)}")
            raise PersistenceError(operation, str(e)) from e
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Delivery notes
    # ------------------------------------------------------------------

    def list_delivery_notes(self) -> List[DeliveryNoteResponse]:
        """All delivery notes, most recently updated first"""
        with self._session("list_delivery_notes") as db:
            rows = db.query(DeliveryNote).order_by(DeliveryNote.updated_at.desc()).all()
            return [row_to_delivery_note(row) for row in rows]

    def list_delivery_notes_for_po(self, po_number: str) -> List[DeliveryNoteResponse]:
        with self._session("list_delivery_notes_for_po") as db:
            rows = (
                db.query(DeliveryNote)
                .filter(DeliveryNote.po_number == po_number)
                .order_by(DeliveryNote.date.desc())
                .all()
            )
            return [row_to_delivery_note(row) for row in rows]

    def get_delivery_note(self, note_id: str) -> DeliveryNoteResponse:
        with self._session("get_delivery_note") as db:
            row = db.query(DeliveryNote).filter(DeliveryNote.id == note_id).first()
            if not row:
                raise NotFoundError("Delivery note", note_id)
            return row_to_delivery_note(row)

    def insert_delivery_note(self, data: DeliveryNoteCreate) -> DeliveryNoteResponse:
        """Insert a note; new notes always start as 'awaiting'."""
        values = delivery_note_to_row(data.model_dump())
        values["status"] = DeliveryStatus.AWAITING.value
        with self._session("insert_delivery_note") as db:
            row = DeliveryNote(**values)
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info(f"Created delivery note {row.delivery_note_number} ({row.id})")
            return row_to_delivery_note(row)

    def patch_delivery_note(self, note_id: str, updates: dict) -> DeliveryNoteResponse:
        """Apply only the given fields and bump updated_at."""
        values = delivery_note_to_row(updates)
        values["updated_at"] = datetime.now(timezone.utc)
        with self._session("patch_delivery_note") as db:
            row = db.query(DeliveryNote).filter(DeliveryNote.id == note_id).first()
            if not row:
                raise NotFoundError("Delivery note", note_id)
            for key, value in values.items():
                setattr(row, key, value)
            db.commit()
            db.refresh(row)
            return row_to_delivery_note(row)

    def delete_delivery_note(self, note_id: str) -> bool:
        with self._session("delete_delivery_note") as db:
            row = db.query(DeliveryNote).filter(DeliveryNote.id == note_id).first()
            if not row:
                raise NotFoundError("Delivery note", note_id)
            db.delete(row)
            db.commit()
            logger.info(f"Deleted delivery note {note_id}")
            return True

    # ------------------------------------------------------------------
    # Purchase orders
    # ------------------------------------------------------------------

    def list_purchase_orders(self) -> List[PurchaseOrderSummary]:
        """Read-only projection of all POs, newest first"""
        with self._session("list_purchase_orders") as db:
            rows = db.query(PurchaseOrder).order_by(PurchaseOrder.created_at.desc()).all()
            return [PurchaseOrderSummary.model_validate(row) for row in rows]

    def get_purchase_order_balance(self, po_number: str) -> Optional[Tuple[str, float]]:
        """
        Point read used by reconciliation.

        Returns:
            Tuple of (po_id, total_tonnage), or None if no PO has this number
        """
        with self._session("get_purchase_order_balance") as db:
            row = (
                db.query(PurchaseOrder.id, PurchaseOrder.total_tonnage)
                .filter(PurchaseOrder.po_number == po_number)
                .first()
            )
            if not row:
                return None
            return row.id, float(row.total_tonnage)

    def update_purchase_order_balance(
        self,
        po_id: str,
        shipped_tonnage: float,
        remaining_tonnage: float,
        status: str,
    ) -> None:
        with self._session("update_purchase_order_balance") as db:
            updated = (
                db.query(PurchaseOrder)
                .filter(PurchaseOrder.id == po_id)
                .update(
                    {
                        PurchaseOrder.shipped_tonnage: shipped_tonnage,
                        PurchaseOrder.remaining_tonnage: remaining_tonnage,
                        PurchaseOrder.status: status,
                        PurchaseOrder.updated_at: datetime.now(timezone.utc),
                    },
                    synchronize_session=False,
                )
            )
            if not updated:
                raise NotFoundError("Purchase order", po_id)
            db.commit()
