import asyncio
import kopf
import logging
from collections import defaultdict
from typing import Dict, Tuple
from zerg.controller import ReconcileResult
from zerg.resources import DependencyManager
from zerg.sensors import OperatorSensor
from zerg.types.models import Phase
from zerg.types.settings import STEADY_STATE_REQUEUE_SECONDS
from zerg.utils.errors import FinalizerError

KIND = DependencyManager.KIND

# Phases a finished pass leaves behind. The timer re-runs those, including a
# failed timer pass that kopf retries after the failure delay.
SETTLED_PHASES = {Phase.READY.value, Phase.FAILED.value}

# One pass at a time per (namespace, name); handlers and timers share these.
reconcile_locks: Dict[Tuple[str, str], asyncio.Lock] = defaultdict(asyncio.Lock)


class TimerLogFilter(logging.Filter):
    def filter(self, record):
        """Timer logs are noisy so we filter them out."""
        return "Timer " not in record.getMessage()


kopf_logger = logging.getLogger("kopf.objects")
kopf_logger.addFilter(TimerLogFilter())


def get_sensor(memo: kopf.Memo) -> OperatorSensor:
    return getattr(memo, "sensor", None) or OperatorSensor()


async def reconcile(
    body,
    name: str,
    namespace: str,
    meta,
    memo: kopf.Memo,
    logger: logging.Logger,
    trigger_source: str,
) -> ReconcileResult:
    """Run one serialized reconcile pass and translate its outcome for kopf.

    A pass that ended Failed, or raised, becomes a kopf.TemporaryError so
    kopf retries it after the configured fixed delay.
    """
    sensor = get_sensor(memo)
    sensor_state = sensor.on_reconcile_start(
        name, namespace, meta.get("generation", 0), trigger_source
    )
    result = None
    error = None
    try:
        async with reconcile_locks[(namespace, name)]:
            async with memo.slots:
                logger.debug(f"Reconciling {KIND}/{name} in {namespace} namespace.")
                result = await memo.engine.reconcile(body, logger=logger)
    except FinalizerError as e:
        error = e
        logger.warning(f"Finalizer update failed: {e}")
        raise kopf.TemporaryError(str(e), delay=memo.conf.error_requeue_seconds)
    except Exception as e:
        error = e
        logger.error(f"Unexpected error during reconciliation: {e}")
        logger.exception(e)
        raise kopf.TemporaryError(
            f"Reconciliation failed: {e}", delay=memo.conf.error_requeue_seconds
        )
    finally:
        phase = result.phase.value if result and result.phase else None
        sensor.on_reconcile_complete(
            name, namespace, sensor_state, phase, error is None, error
        )

    if result.failed:
        raise kopf.TemporaryError(result.message, delay=result.action.delay)
    return result


@kopf.on.resume(kind=KIND)
@kopf.on.create(kind=KIND)
@kopf.on.update(kind=KIND, field="spec")
async def on_reconcile(
    body,
    name,
    namespace,
    meta,
    memo: kopf.Memo,
    logger: logging.Logger,
    reason,
    **kwargs,
):
    """Converge DependencyManager resources."""
    await reconcile(body, name, namespace, meta, memo, logger, reason.value)


@kopf.on.delete(kind=KIND, optional=True)
async def on_delete(
    body, name, namespace, meta, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    """Release the finalizer of a DependencyManager being deleted."""
    await reconcile(body, name, namespace, meta, memo, logger, "delete")
    reconcile_locks.pop((namespace, name), None)


@kopf.timer(
    KIND,
    interval=STEADY_STATE_REQUEUE_SECONDS,
    initial_delay=STEADY_STATE_REQUEUE_SECONDS,
)
async def reverify(
    body,
    name,
    namespace,
    meta,
    status,
    memo: kopf.Memo,
    logger: logging.Logger,
    **kwargs,
):
    """Re-verify settled resources at the steady-state interval."""
    if (status or {}).get("phase") not in SETTLED_PHASES:
        return
    await reconcile(body, name, namespace, meta, memo, logger, "timer")
