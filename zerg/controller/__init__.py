from .engine import Action, ActionKind, ReconcileEngine, ReconcileResult
from .lifecycle import FINALIZER, LifecycleState, lifecycle_state
from .status import StatusWriter

__all__ = [
    "Action",
    "ActionKind",
    "ReconcileEngine",
    "ReconcileResult",
    "FINALIZER",
    "LifecycleState",
    "lifecycle_state",
    "StatusWriter",
]
