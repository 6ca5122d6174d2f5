from suratjalan.models.delivery_note import DeliveryNote
from suratjalan.models.purchase_order import PurchaseOrder
from suratjalan.models.user import User

__all__ = ["DeliveryNote", "PurchaseOrder", "User"]
