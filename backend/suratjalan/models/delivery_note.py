from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Text, Date, DateTime, Float, Boolean, JSON
from sqlalchemy.sql import func
from suratjalan.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeliveryNote(Base):
    """A single truck/driver/destination shipment (surat jalan)"""
    __tablename__ = "delivery_notes"

    id = Column(String(36), primary_key=True, default=_uuid, index=True)
    date = Column(Date, nullable=False)
    vehicle_plate = Column(String, nullable=False)
    driver_name = Column(String, nullable=False)
    delivery_note_number = Column(String, unique=True, nullable=False, index=True)
    destination = Column(String, nullable=False)

    # Loose join key to purchase_orders.po_number; NULL means "no PO"
    po_number = Column(String, nullable=True, index=True)

    # Only authoritative once status is 'completed'
    net_weight = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default="awaiting", index=True)  # awaiting, in-transit, completed
    notes = Column(Text, nullable=True)

    # Seals
    has_seal = Column(Boolean, nullable=False, default=False)
    seal_numbers = Column(JSON, nullable=False, default=list)

    company = Column(String(20), nullable=False, default="sbs")  # sbs, mbs, perorangan

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True)
