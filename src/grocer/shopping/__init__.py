"""Shopping list derivation, reconciliation and editing."""

from grocer.shopping.aggregator import generate_candidates
from grocer.shopping.assignments import StoreAssignmentIndex
from grocer.shopping.history import ActionLog
from grocer.shopping.item_store import ItemStore, ResetOutcome
from grocer.shopping.reconcile import ReconcileResult, Reconciler
from grocer.shopping.service import HistoryOutcome, ShoppingListService
from grocer.shopping.storage import MealPlanStorage, ShoppingListStorage

__all__ = [
    "ActionLog",
    "HistoryOutcome",
    "ItemStore",
    "MealPlanStorage",
    "ReconcileResult",
    "Reconciler",
    "ResetOutcome",
    "ShoppingListService",
    "ShoppingListStorage",
    "StoreAssignmentIndex",
    "generate_candidates",
]
