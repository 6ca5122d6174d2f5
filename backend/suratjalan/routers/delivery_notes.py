import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from suratjalan.dependencies import get_note_cache, require_permission
from suratjalan.schemas.delivery_note import (
    Company,
    DeliveryNoteCreate,
    DeliveryNoteResponse,
    DeliveryNoteUpdate,
    DeliveryStats,
    DeliveryStatus,
)
from suratjalan.services.delivery_note_cache import DeliveryNoteCache
from suratjalan.exceptions import NotFoundError
from suratjalan.utils.permissions import Capability

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/delivery-notes", tags=["delivery-notes"])

can_view = require_permission(Capability.VIEW_DASHBOARD)
can_manage = require_permission(Capability.MANAGE_DELIVERY_NOTES)
can_print = require_permission(Capability.PRINT_DOCUMENTS)


@router.get("", response_model=List[DeliveryNoteResponse], dependencies=[Depends(can_view)])
async def list_delivery_notes(
    status: Optional[DeliveryStatus] = Query(None, description="Filter by status"),
    po_number: Optional[str] = Query(None, description="Filter by PO number"),
    company: Optional[Company] = Query(None, description="Filter by company"),
    cache: DeliveryNoteCache = Depends(get_note_cache),
):
    """List delivery notes, most recently updated first"""
    return cache.list_notes(
        status=status.value if status else None,
        po_number=po_number,
        company=company.value if company else None,
    )


@router.get("/stats", response_model=DeliveryStats, dependencies=[Depends(can_view)])
async def get_delivery_stats(cache: DeliveryNoteCache = Depends(get_note_cache)):
    """Counts per status and total shipped weight"""
    return cache.get_stats()


@router.post("/refresh", response_model=List[DeliveryNoteResponse], dependencies=[Depends(can_view)])
async def refresh_delivery_notes(cache: DeliveryNoteCache = Depends(get_note_cache)):
    """Reload the delivery note list from the database"""
    return await cache.load()


@router.get("/{note_id}", response_model=DeliveryNoteResponse, dependencies=[Depends(can_view)])
async def get_delivery_note(note_id: str, cache: DeliveryNoteCache = Depends(get_note_cache)):
    note = cache.get(note_id)
    if note is None:
        raise NotFoundError("Delivery note", note_id)
    return note


@router.post("", response_model=DeliveryNoteResponse, dependencies=[Depends(can_manage)])
async def create_delivery_note(
    note_data: DeliveryNoteCreate,
    cache: DeliveryNoteCache = Depends(get_note_cache),
):
    """Create a delivery note; it always starts as 'awaiting'"""
    return await cache.create_note(note_data)


@router.patch("/{note_id}", response_model=DeliveryNoteResponse, dependencies=[Depends(can_manage)])
async def update_delivery_note(
    note_id: str,
    updates: DeliveryNoteUpdate,
    debounce: bool = Query(False, description="Coalesce rapid edits into one write"),
    cache: DeliveryNoteCache = Depends(get_note_cache),
):
    """
    Partially update a delivery note.

    Changing the PO number recomputes the balances of the old and new PO.
    """
    if debounce:
        return await cache.debounced_update_note(note_id, updates)
    return await cache.update_note(note_id, updates)


@router.delete("/{note_id}", dependencies=[Depends(can_manage)])
async def delete_delivery_note(note_id: str, cache: DeliveryNoteCache = Depends(get_note_cache)):
    await cache.remove_note(note_id)
    return {"deleted": True, "id": note_id}


@router.post("/{note_id}/print", response_model=DeliveryNoteResponse, dependencies=[Depends(can_print)])
async def print_delivery_note(note_id: str, cache: DeliveryNoteCache = Depends(get_note_cache)):
    """
    Record that the surat jalan was printed.

    Printing sends the truck on its way, so the note moves to 'in-transit'.
    Document rendering happens in the client.
    """
    note = await cache.mark_in_transit(note_id)
    logger.info(f"Delivery note {note.delivery_note_number} printed, status now {note.status.value}")
    return note
