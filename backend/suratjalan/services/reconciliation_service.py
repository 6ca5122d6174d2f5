"""
Reconciliation Service - recomputes a purchase order's shipped/remaining
tonnage and status from the delivery notes that currently reference it.

Each PO is a separate read-then-write with no cross-record transaction and no
row version check, so a concurrent edit from another session can be
overwritten. PO tonnage fields are eventually-consistent summaries.
"""
import logging
from typing import List, Optional

from suratjalan.exceptions import PersistenceError
from suratjalan.schemas.delivery_note import normalize_po_number
from suratjalan.schemas.purchase_order import POBalance
from suratjalan.services.store_gateway import StoreGateway
from suratjalan.utils.tonnage_rules import compute_po_balance, sum_net_weight

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Keeps PO tonnage summaries in line with linked delivery notes"""

    def __init__(self, gateway: StoreGateway):
        self.gateway = gateway

    def reconcile_po_link_change(
        self, old_po: Optional[str], new_po: Optional[str]
    ) -> List[POBalance]:
        """
        Recompute both POs touched by a delivery note's PO link change.

        No reads or writes happen when the link did not change. "No PO" on
        either side is skipped.

        Returns:
            Balances written, old PO first
        """
        old_po = normalize_po_number(old_po)
        new_po = normalize_po_number(new_po)
        if old_po == new_po:
            return []

        balances = []
        for po_number in (old_po, new_po):
            if not po_number:
                continue
            balance = self.recompute_po_balance(po_number)
            if balance:
                balances.append(balance)
        return balances

    def recompute_po_balance(self, po_number: str) -> Optional[POBalance]:
        """
        Sum net weight over every note referencing ``po_number`` and write the
        shipped/remaining tonnage and status back to the PO.

        Returns:
            The written POBalance, or None if no PO has this number
        """
        try:
            notes = self.gateway.list_delivery_notes_for_po(po_number)
            total_shipped = sum_net_weight(note.net_weight for note in notes)

            po = self.gateway.get_purchase_order_balance(po_number)
            if po is None:
                logger.warning(f"PO {po_number} referenced by delivery notes does not exist; skipping reconciliation")
                return None
            po_id, total_tonnage = po

            remaining, status = compute_po_balance(total_tonnage, total_shipped)
            self.gateway.update_purchase_order_balance(
                po_id,
                shipped_tonnage=total_shipped,
                remaining_tonnage=remaining,
                status=status.value,
            )
        except PersistenceError as e:
            logger.error(f"Reconciliation of PO {po_number} failed: {e.message}")
            raise

        logger.info(
            f"Reconciled PO {po_number}: shipped={total_shipped}, remaining={remaining}, status={status.value}"
        )
        return POBalance(
            po_id=po_id,
            po_number=po_number,
            total_tonnage=total_tonnage,
            shipped_tonnage=total_shipped,
            remaining_tonnage=remaining,
            status=status,
        )
