"""
Purchase order balance rules.

Pure helpers used by the reconciliation service: each returns a value and
never touches the database.
"""
from typing import Iterable, Optional, Tuple

from suratjalan.schemas.purchase_order import POStatus


def sum_net_weight(weights: Iterable[Optional[float]]) -> float:
    """Total shipped weight; a note without a weight counts as zero."""
    return float(sum(w or 0 for w in weights))


def remaining_tonnage(total_tonnage: float, shipped_tonnage: float) -> float:
    """Remaining tonnage, floored at zero"""
    remaining = total_tonnage - shipped_tonnage
    return remaining if remaining > 0 else 0.0


def derive_po_status(total_tonnage: float, shipped_tonnage: float) -> POStatus:
    """
    Derive PO status from shipped vs contracted tonnage.

    Rules:
    - Completed: shipped >= total
    - Partial:   0 < shipped < total
    - Active:    nothing shipped yet
    """
    if shipped_tonnage >= total_tonnage:
        return POStatus.COMPLETED
    if shipped_tonnage > 0:
        return POStatus.PARTIAL
    return POStatus.ACTIVE


def compute_po_balance(total_tonnage: float, shipped_tonnage: float) -> Tuple[float, POStatus]:
    """
    Returns:
        Tuple of (remaining_tonnage, status)
    """
    return (
        remaining_tonnage(total_tonnage, shipped_tonnage),
        derive_po_status(total_tonnage, shipped_tonnage),
    )
