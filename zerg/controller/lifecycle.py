from enum import Enum
from typing import Dict
from zerg.resources.dependencymanager import DependencyManager

FINALIZER = DependencyManager.FINALIZER


class LifecycleState(str, Enum):
    """Where an object stands in the finalizer protocol.

    UNMANAGED   finalizer not attached yet, not deleting
    ACTIVE      finalizer attached, not deleting
    TERMINATING deleting, finalizer still blocks removal
    RELEASED    deleting, finalizer gone
    """

    UNMANAGED = "Unmanaged"
    ACTIVE = "Active"
    TERMINATING = "Terminating"
    RELEASED = "Released"


def lifecycle_state(body: Dict) -> LifecycleState:
    metadata = body.get("metadata") or {}
    finalized = FINALIZER in (metadata.get("finalizers") or [])
    deleting = bool(metadata.get("deletionTimestamp"))
    if deleting:
        return LifecycleState.TERMINATING if finalized else LifecycleState.RELEASED
    return LifecycleState.ACTIVE if finalized else LifecycleState.UNMANAGED
