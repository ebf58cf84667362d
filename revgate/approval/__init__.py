"""
Approval gates, checklist and the pending -> approved/rejected state machine.
"""

from .checklist import MANUAL_ITEMS, build_checklist
from .gates import GATE_ORDER, run_gates
from .manager import ApprovalManager, blockers, checklist_progress

__all__ = [
    "ApprovalManager",
    "GATE_ORDER",
    "MANUAL_ITEMS",
    "blockers",
    "build_checklist",
    "checklist_progress",
    "run_gates",
]
