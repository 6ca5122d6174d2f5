from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import List, Optional
from enum import Enum
from datetime import date, datetime
from decimal import Decimal

from suratjalan.schemas.delivery_note import DeliveryNoteResponse


class POStatus(str, Enum):
    ACTIVE = "Active"
    PARTIAL = "Partial"
    COMPLETED = "Completed"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class PurchaseOrderCreate(BaseModel):
    po_number: str = Field(..., min_length=1)
    po_date: date
    buyer_name: Optional[str] = None
    buyer_address: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_email: Optional[str] = None
    product_type: str = Field(..., min_length=1)
    total_tonnage: float = Field(..., gt=0)
    price_per_ton: Decimal = Field(..., gt=0)
    delivery_deadline: Optional[date] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    ppn_enabled: bool = False
    ppn_rate: Optional[float] = Field(None, ge=0, le=1)


class PurchaseOrderUpdate(BaseModel):
    po_date: Optional[date] = None
    buyer_name: Optional[str] = None
    buyer_address: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_email: Optional[str] = None
    product_type: Optional[str] = Field(None, min_length=1)
    total_tonnage: Optional[float] = Field(None, gt=0)
    price_per_ton: Optional[Decimal] = Field(None, gt=0)
    status: Optional[POStatus] = None
    delivery_deadline: Optional[date] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    ppn_enabled: Optional[bool] = None
    ppn_rate: Optional[float] = Field(None, ge=0, le=1)

    @field_validator("po_date", "product_type", "total_tonnage", "price_per_ton", "status", "ppn_enabled")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class PurchaseOrderSummary(BaseModel):
    """Read-only projection used by delivery note screens"""
    id: str
    po_number: str
    po_date: date
    product_type: str
    total_tonnage: float
    price_per_ton: Decimal
    total_value: Decimal
    shipped_tonnage: float
    remaining_tonnage: float
    status: str
    buyer_name: Optional[str] = None
    buyer_address: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PurchaseOrderResponse(PurchaseOrderSummary):
    buyer_phone: Optional[str] = None
    buyer_email: Optional[str] = None
    delivery_deadline: Optional[date] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None
    ppn_enabled: bool = False
    ppn_rate: Optional[float] = None


class PurchaseOrderDetailResponse(PurchaseOrderResponse):
    deliveries: List[DeliveryNoteResponse] = []


class POBalance(BaseModel):
    """Result of recomputing one PO from its linked delivery notes"""
    po_id: str
    po_number: str
    total_tonnage: float
    shipped_tonnage: float
    remaining_tonnage: float
    status: POStatus
