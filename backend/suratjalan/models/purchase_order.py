from sqlalchemy import Column, String, Text, Date, DateTime, Float, Numeric, Boolean
from sqlalchemy.sql import func
from suratjalan.database import Base
from suratjalan.models.delivery_note import _uuid, _utcnow


class PurchaseOrder(Base):
    """A buyer contract for a total tonnage delivered over one or more delivery notes"""
    __tablename__ = "purchase_orders"

    id = Column(String(36), primary_key=True, default=_uuid, index=True)
    po_number = Column(String, unique=True, nullable=False, index=True)
    po_date = Column(Date, nullable=False)

    # Buyer
    buyer_name = Column(String, nullable=True)
    buyer_address = Column(String, nullable=True)
    buyer_phone = Column(String, nullable=True)
    buyer_email = Column(String, nullable=True)

    product_type = Column(String, nullable=False)  # CPO, UCO, Minyak Ikan, ...
    total_tonnage = Column(Float, nullable=False)
    price_per_ton = Column(Numeric(14, 2), nullable=False)
    total_value = Column(Numeric(16, 2), nullable=False)

    # Derived from linked delivery notes by reconciliation
    shipped_tonnage = Column(Float, nullable=False, default=0)
    remaining_tonnage = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Active", index=True)  # Active, Partial, Completed, Overdue, Cancelled

    delivery_deadline = Column(Date, nullable=True)
    payment_terms = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    ppn_enabled = Column(Boolean, nullable=False, default=False)
    ppn_rate = Column(Float, nullable=True)  # 0.11 for 11%

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow)
