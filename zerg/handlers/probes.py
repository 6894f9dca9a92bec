import datetime
import kopf
from zerg.handlers.dependencymanager import reconcile_locks


# Liveness probe
@kopf.on.probe(id="now")
def get_current_timestamp(**kwargs):
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@kopf.on.probe(id="reconciling")
def get_reconciling_count(**kwargs):
    """Number of DependencyManagers with a pass in flight."""
    return sum(1 for lock in reconcile_locks.values() if lock.locked())
