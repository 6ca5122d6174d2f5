"""
Tests for PO balance reconciliation.
"""
from unittest.mock import MagicMock

import pytest

from suratjalan.exceptions import PersistenceError
from suratjalan.schemas.purchase_order import POStatus
from suratjalan.services.reconciliation_service import ReconciliationService
from suratjalan.services.store_gateway import StoreGateway


@pytest.mark.unit
class TestLinkChangeShortCircuit:

    @pytest.mark.parametrize(
        "old,new",
        [("PO-1", "PO-1"), (None, None), ("-", None), ("", "-"), (None, "")],
    )
    def test_unchanged_link_touches_nothing(self, old, new):
        gateway = MagicMock(spec=StoreGateway)
        service = ReconciliationService(gateway)

        assert service.reconcile_po_link_change(old, new) == []
        assert gateway.method_calls == []

    def test_only_new_po_recomputed_when_linking(self):
        gateway = MagicMock(spec=StoreGateway)
        gateway.list_delivery_notes_for_po.return_value = []
        gateway.get_purchase_order_balance.return_value = ("po-id", 100.0)
        service = ReconciliationService(gateway)

        balances = service.reconcile_po_link_change(None, "PO-9")

        assert [b.po_number for b in balances] == ["PO-9"]
        gateway.list_delivery_notes_for_po.assert_called_once_with("PO-9")
        gateway.update_purchase_order_balance.assert_called_once_with(
            "po-id", shipped_tonnage=0.0, remaining_tonnage=100.0, status="Active"
        )

    def test_gateway_failure_propagates(self):
        gateway = MagicMock(spec=StoreGateway)
        gateway.list_delivery_notes_for_po.side_effect = PersistenceError("list_delivery_notes_for_po", "timeout")
        service = ReconciliationService(gateway)

        with pytest.raises(PersistenceError):
            service.recompute_po_balance("PO-1")
        gateway.update_purchase_order_balance.assert_not_called()


@pytest.mark.integration
class TestRecomputeAgainstDatabase:

    def test_move_note_between_pos(self, reconciliation, gateway, make_po, make_note, po_row):
        make_po("PO-100", total_tonnage=100)
        make_po("PO-200", total_tonnage=50)
        moving = make_note(po_number="PO-100")
        make_note(po_number="PO-100", net_weight=30, status="completed")

        gateway.patch_delivery_note(moving.id, {"po_number": "PO-200"})
        balances = reconciliation.reconcile_po_link_change("PO-100", "PO-200")

        assert [b.po_number for b in balances] == ["PO-100", "PO-200"]
        old_po, new_po = po_row("PO-100"), po_row("PO-200")
        assert (old_po.shipped_tonnage, old_po.remaining_tonnage, old_po.status) == (30, 70, "Partial")
        assert (new_po.shipped_tonnage, new_po.remaining_tonnage, new_po.status) == (0, 50, "Active")

    def test_over_shipped_po_is_completed_with_zero_remaining(self, reconciliation, make_po, make_note, po_row):
        make_po("PO-300", total_tonnage=100)
        make_note(po_number="PO-300", net_weight=40)
        make_note(po_number="PO-300", net_weight=70)

        balance = reconciliation.recompute_po_balance("PO-300")

        assert balance.shipped_tonnage == 110
        assert balance.remaining_tonnage == 0
        assert balance.status is POStatus.COMPLETED
        assert po_row("PO-300").remaining_tonnage == 0

    def test_unknown_po_is_skipped(self, reconciliation, make_note):
        make_note(po_number="PO-GHOST", net_weight=12)
        assert reconciliation.recompute_po_balance("PO-GHOST") is None

    def test_unrelated_pos_untouched(self, reconciliation, make_po, make_note, po_row):
        make_po("PO-A", total_tonnage=10)
        make_po("PO-B", total_tonnage=10, shipped_tonnage=3, remaining_tonnage=7, status="Partial")
        make_note(po_number="PO-A", net_weight=4)

        reconciliation.reconcile_po_link_change(None, "PO-A")

        other = po_row("PO-B")
        assert (other.shipped_tonnage, other.status) == (3, "Partial")
