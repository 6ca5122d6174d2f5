from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import List, Optional
from enum import Enum
import datetime as dt


class DeliveryStatus(str, Enum):
    """Delivery note lifecycle"""
    AWAITING = "awaiting"
    IN_TRANSIT = "in-transit"
    COMPLETED = "completed"


class Company(str, Enum):
    """Legal entity issuing the delivery note"""
    SBS = "sbs"
    MBS = "mbs"
    PERORANGAN = "perorangan"


NO_PO_MARKERS = {"", "-"}


def normalize_po_number(value: Optional[str]) -> Optional[str]:
    """'', '-' and None all mean the note is not tied to a PO."""
    if value is None:
        return None
    value = value.strip()
    if value in NO_PO_MARKERS:
        return None
    return value


def _clean_seal_numbers(values: Optional[List[str]]) -> List[str]:
    if not values:
        return []
    return [v.strip() for v in values if v and v.strip()]


class DeliveryNoteCreate(BaseModel):
    date: dt.date
    vehicle_plate: str = Field(..., min_length=1)
    driver_name: str = Field(..., min_length=1)
    delivery_note_number: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    po_number: Optional[str] = None
    net_weight: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    has_seal: bool = False
    seal_numbers: List[str] = []
    company: Company = Company.SBS

    @field_validator("po_number")
    @classmethod
    def normalize_po(cls, value):
        return normalize_po_number(value)

    @field_validator("seal_numbers")
    @classmethod
    def clean_seals(cls, value):
        return _clean_seal_numbers(value)


class DeliveryNoteUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied"""
    date: Optional[dt.date] = None
    vehicle_plate: Optional[str] = Field(None, min_length=1)
    driver_name: Optional[str] = Field(None, min_length=1)
    delivery_note_number: Optional[str] = Field(None, min_length=1)
    destination: Optional[str] = Field(None, min_length=1)
    po_number: Optional[str] = None
    net_weight: Optional[float] = Field(None, ge=0)
    status: Optional[DeliveryStatus] = None
    notes: Optional[str] = None
    has_seal: Optional[bool] = None
    seal_numbers: Optional[List[str]] = None
    company: Optional[Company] = None

    @field_validator(
        "date",
        "vehicle_plate",
        "driver_name",
        "delivery_note_number",
        "destination",
        "status",
        "has_seal",
        "company",
    )
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        # May be omitted, but not cleared
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("po_number")
    @classmethod
    def normalize_po(cls, value):
        return normalize_po_number(value)

    @field_validator("seal_numbers")
    @classmethod
    def clean_seals(cls, value):
        return _clean_seal_numbers(value)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class DeliveryNoteResponse(BaseModel):
    id: str
    date: dt.date
    vehicle_plate: str
    driver_name: str
    delivery_note_number: str
    destination: str
    po_number: Optional[str] = None
    net_weight: Optional[float] = None
    status: DeliveryStatus
    notes: Optional[str] = None
    has_seal: bool = False
    seal_numbers: List[str] = []
    company: Company = Company.SBS
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class DeliveryStats(BaseModel):
    total: int
    awaiting: int
    in_transit: int
    completed: int
    total_weight: float
