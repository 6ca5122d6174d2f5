"""
Delivery Note Cache - the single owner of the in-memory delivery note list.

Edits are applied optimistically: the cached note is replaced with the merged
value before the database write starts, then swapped for the authoritative
row on success or restored to its previous value on failure.

Sequencing
----------
Every update gets a per-note sequence number, and the cache keeps the last
authoritative record seen for each note (from load, create, or any successful
write, including superseded ones). A response for a superseded request does
not touch the cache while a newer request is still in flight. When the latest
request fails, or the last in-flight request settles, the note is set back to
that authoritative record, never to another request's optimistic value.

Reconciliation
--------------
After a successful write, PO balances are recomputed when the note's PO link
changed. With ``reconcile_on_every_change`` they are also recomputed when a
note is created or deleted, or its weight changes under the same PO. A
reconciliation failure is not rolled back: the note update stands and the
error propagates.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from suratjalan.config import settings
from suratjalan.exceptions import NotFoundError, PersistenceError, ValidationError
from suratjalan.schemas.delivery_note import (
    DeliveryNoteCreate,
    DeliveryNoteResponse,
    DeliveryNoteUpdate,
    DeliveryStats,
    DeliveryStatus,
)
from suratjalan.schemas.purchase_order import POBalance
from suratjalan.services.reconciliation_service import ReconciliationService
from suratjalan.services.store_gateway import StoreGateway

logger = logging.getLogger(__name__)

NoteChanges = Union[DeliveryNoteUpdate, dict]


@dataclass
class _PendingUpdate:
    """Debounced changes for one note waiting for the quiet interval to pass"""
    future: asyncio.Future
    changes: dict = field(default_factory=dict)
    handle: Optional[asyncio.TimerHandle] = None


class DeliveryNoteCache:
    """Optimistic, reconciled view of the delivery notes table"""

    def __init__(
        self,
        gateway: StoreGateway,
        reconciliation: ReconciliationService,
        reconcile_on_every_change: Optional[bool] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.gateway = gateway
        self.reconciliation = reconciliation
        if reconcile_on_every_change is None:
            reconcile_on_every_change = settings.reconcile_on_every_change
        if debounce_seconds is None:
            debounce_seconds = settings.update_debounce_seconds
        self.reconcile_on_every_change = reconcile_on_every_change
        self.debounce_seconds = debounce_seconds

        self._notes: List[DeliveryNoteResponse] = []
        self._lock = threading.RLock()
        self._sequence: Dict[str, int] = {}
        self._in_flight: Dict[str, Set[int]] = {}
        self._committed: Dict[str, Tuple[int, DeliveryNoteResponse]] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._pending: Dict[str, _PendingUpdate] = {}
        self.loaded = False
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def notes(self) -> List[DeliveryNoteResponse]:
        with self._lock:
            return list(self._notes)

    def get(self, note_id: str) -> Optional[DeliveryNoteResponse]:
        with self._lock:
            index = self._index_of(note_id)
            return self._notes[index] if index is not None else None

    def list_notes(
        self,
        status: Optional[str] = None,
        po_number: Optional[str] = None,
        company: Optional[str] = None,
    ) -> List[DeliveryNoteResponse]:
        notes = self.notes
        if status:
            notes = [n for n in notes if n.status.value == status]
        if po_number:
            notes = [n for n in notes if n.po_number == po_number]
        if company:
            notes = [n for n in notes if n.company.value == company]
        return notes

    def get_stats(self) -> DeliveryStats:
        notes = self.notes
        return DeliveryStats(
            total=len(notes),
            awaiting=sum(1 for n in notes if n.status == DeliveryStatus.AWAITING),
            in_transit=sum(1 for n in notes if n.status == DeliveryStatus.IN_TRANSIT),
            completed=sum(1 for n in notes if n.status == DeliveryStatus.COMPLETED),
            total_weight=sum(n.net_weight or 0 for n in notes),
        )

    def _index_of(self, note_id: str) -> Optional[int]:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    def _put(self, note: DeliveryNoteResponse) -> None:
        index = self._index_of(note.id)
        if index is not None:
            self._notes[index] = note

    # ------------------------------------------------------------------
    # Bulk load / create / delete
    # ------------------------------------------------------------------

    async def load(self) -> List[DeliveryNoteResponse]:
        """Replace the cache with the current contents of the store"""
        try:
            notes = await run_in_threadpool(self.gateway.list_delivery_notes)
        except PersistenceError as e:
            self.last_error = f"Failed to load delivery notes: {e.message}"
            logger.error(self.last_error)
            raise
        with self._lock:
            self._notes = notes
            self._committed = {note.id: (0, note) for note in notes}
            self.loaded = True
        self.last_error = None
        logger.info(f"Loaded {len(notes)} delivery notes")
        return notes

    async def ensure_loaded(self) -> None:
        if not self.loaded:
            await self.load()

    async def create_note(self, data: DeliveryNoteCreate) -> DeliveryNoteResponse:
        try:
            note = await run_in_threadpool(self.gateway.insert_delivery_note, data)
        except PersistenceError as e:
            self.last_error = f"Failed to save delivery note: {e.message}"
            logger.error(self.last_error)
            raise
        with self._lock:
            self._notes.insert(0, note)
            self._committed[note.id] = (0, note)
        self.last_error = None

        if self.reconcile_on_every_change and note.po_number and note.net_weight:
            await self._recompute(note.po_number)
        return note

    async def remove_note(self, note_id: str) -> bool:
        note = self.get(note_id)
        if note is None:
            note = await run_in_threadpool(self.gateway.get_delivery_note, note_id)
        try:
            await run_in_threadpool(self.gateway.delete_delivery_note, note_id)
        except PersistenceError as e:
            self.last_error = f"Failed to delete delivery note: {e.message}"
            logger.error(self.last_error)
            raise
        with self._lock:
            self._notes = [n for n in self._notes if n.id != note_id]
            self._sequence.pop(note_id, None)
            self._in_flight.pop(note_id, None)
            self._committed.pop(note_id, None)
        self.last_error = None

        if self.reconcile_on_every_change and note.po_number:
            await self._recompute(note.po_number)
        return True

    # ------------------------------------------------------------------
    # Optimistic update
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_changes(updates: NoteChanges) -> dict:
        if not isinstance(updates, DeliveryNoteUpdate):
            try:
                updates = DeliveryNoteUpdate.model_validate(updates)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid delivery note update: {e}") from e
        return updates.changes()

    async def update_note(self, note_id: str, updates: NoteChanges) -> DeliveryNoteResponse:
        """
        Optimistically update a cached note, then write it to the store.

        The cache reflects the merged value before this coroutine first
        suspends. On failure the note is restored to its last authoritative
        record and the error re-raised.

        Raises:
            NotFoundError: note not in the cache
            ValidationError: the changes do not form a valid update
            PersistenceError: the store write or PO reconciliation failed
        """
        changes = self._coerce_changes(updates)

        with self._lock:
            index = self._index_of(note_id)
            if index is None:
                raise NotFoundError("Delivery note", note_id)
            previous = self._notes[index]
            self._committed.setdefault(note_id, (0, previous))
            optimistic = previous.model_copy(
                update={**changes, "updated_at": datetime.now(timezone.utc)}
            )
            self._notes[index] = optimistic
            sequence = self._sequence.get(note_id, 0) + 1
            self._sequence[note_id] = sequence
            self._in_flight.setdefault(note_id, set()).add(sequence)
        self.last_error = None

        try:
            updated = await run_in_threadpool(self.gateway.patch_delivery_note, note_id, changes)
        except Exception as e:
            with self._lock:
                self._settle(note_id, sequence)
            self.last_error = f"Failed to update delivery note: {e}"
            logger.error(f"Error updating delivery note {note_id}, rolled back: {str(e)}")
            raise

        with self._lock:
            committed_sequence, _ = self._committed.get(note_id, (0, None))
            if sequence > committed_sequence:
                self._committed[note_id] = (sequence, updated)
            if not self._settle(note_id, sequence):
                logger.info(f"Discarding stale update response for delivery note {note_id}")

        await self._reconcile_after_update(previous, updated, changes)
        return updated

    def _settle(self, note_id: str, sequence: int) -> bool:
        """
        Mark one request finished and put the authoritative record back if
        this was the latest request or nothing else is in flight.

        Caller holds the lock. Returns True if the cache was written.
        """
        in_flight = self._in_flight.get(note_id, set())
        in_flight.discard(sequence)
        if not in_flight:
            self._in_flight.pop(note_id, None)
        if self._sequence.get(note_id) != sequence and in_flight:
            return False
        committed = self._committed.get(note_id)
        if committed is None:
            return False
        self._put(committed[1])
        return True

    async def _reconcile_after_update(
        self,
        previous: DeliveryNoteResponse,
        updated: DeliveryNoteResponse,
        changes: dict,
    ) -> List[POBalance]:
        if previous.po_number != updated.po_number:
            return await self._run_reconciliation(
                self.reconciliation.reconcile_po_link_change,
                previous.po_number,
                updated.po_number,
            )
        if (
            self.reconcile_on_every_change
            and updated.po_number
            and "net_weight" in changes
            and previous.net_weight != updated.net_weight
        ):
            return await self._recompute(updated.po_number)
        return []

    async def _recompute(self, po_number: str) -> List[POBalance]:
        return await self._run_reconciliation(self.reconciliation.recompute_po_balance, po_number)

    async def _run_reconciliation(self, func, *args) -> List[POBalance]:
        try:
            result = await run_in_threadpool(func, *args)
        except PersistenceError as e:
            self.last_error = f"Delivery note saved but PO balance could not be updated: {e.message}"
            raise
        if result is None:
            return []
        return result if isinstance(result, list) else [result]

    async def mark_in_transit(self, note_id: str) -> DeliveryNoteResponse:
        """Print side effect: the note is on its way once its document is printed."""
        return await self.update_note(note_id, {"status": DeliveryStatus.IN_TRANSIT})

    # ------------------------------------------------------------------
    # Debounced update
    # ------------------------------------------------------------------

    async def debounced_update_note(self, note_id: str, updates: NoteChanges) -> DeliveryNoteResponse:
        """
        Coalesce rapid edits to one note into a single update_note call.

        Each call restarts the quiet interval and merges its fields over the
        pending ones; every caller receives the result of the one write.
        """
        changes = self._coerce_changes(updates)
        loop = asyncio.get_running_loop()

        pending = self._pending.get(note_id)
        if pending is None:
            pending = _PendingUpdate(future=loop.create_future())
            self._pending[note_id] = pending
        elif pending.handle is not None:
            pending.handle.cancel()

        pending.changes.update(changes)
        pending.handle = loop.call_later(self.debounce_seconds, self._fire_debounced, note_id)
        return await asyncio.shield(pending.future)

    def _fire_debounced(self, note_id: str) -> None:
        pending = self._pending.pop(note_id, None)
        if pending is None:
            return
        task = asyncio.ensure_future(self.update_note(note_id, pending.changes))
        # The loop only holds weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        def _resolve(done: asyncio.Task) -> None:
            if pending.future.done():
                return
            if done.cancelled():
                pending.future.cancel()
            elif done.exception() is not None:
                pending.future.set_exception(done.exception())
            else:
                pending.future.set_result(done.result())

        task.add_done_callback(_resolve)
