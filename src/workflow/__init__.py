"""Assignment, forwarding and reconciliation workflows over a store."""

from src.workflow.assignment import (
    Assignment,
    Unassignment,
    assign_scholar,
    find_candidate_scholars,
    list_assignments,
    load_candidate_scholars,
    unassign_scholar,
)
from src.workflow.batch import BatchResult, run_batch
from src.workflow.reconcile import CapacityDrift, apply_capacity_reconciliation, compute_capacity_drift

__all__ = [
    "Assignment",
    "BatchResult",
    "CapacityDrift",
    "Unassignment",
    "apply_capacity_reconciliation",
    "assign_scholar",
    "compute_capacity_drift",
    "find_candidate_scholars",
    "list_assignments",
    "load_candidate_scholars",
    "run_batch",
    "unassign_scholar",
]
