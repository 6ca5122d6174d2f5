from suratjalan.schemas.delivery_note import (
    DeliveryNoteCreate,
    DeliveryNoteUpdate,
    DeliveryNoteResponse,
    DeliveryStats,
    DeliveryStatus,
    Company,
)
from suratjalan.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderUpdate,
    PurchaseOrderSummary,
    PurchaseOrderResponse,
    PurchaseOrderDetailResponse,
    POBalance,
    POStatus,
)

__all__ = [
    "DeliveryNoteCreate",
    "DeliveryNoteUpdate",
    "DeliveryNoteResponse",
    "DeliveryStats",
    "DeliveryStatus",
    "Company",
    "PurchaseOrderCreate",
    "PurchaseOrderUpdate",
    "PurchaseOrderSummary",
    "PurchaseOrderResponse",
    "PurchaseOrderDetailResponse",
    "POBalance",
    "POStatus",
]
