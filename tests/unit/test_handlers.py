"""Unit tests for the kopf handlers of DependencyManager."""

import asyncio
import logging
import kopf
import pytest
from unittest.mock import AsyncMock, Mock
from conftest import make_body
from zerg.controller import Action, ReconcileResult
from zerg.handlers import dependencymanager as handlers
from zerg.types.models import Phase
from zerg.types.settings import Settings
from zerg.utils.errors import FinalizerError

logger = logging.getLogger(__name__)


def make_memo(outcome):
    memo = kopf.Memo()
    memo.conf = Settings(error_requeue_seconds=60)
    memo.sensor = Mock()
    memo.engine = Mock()
    if isinstance(outcome, Exception):
        memo.engine.reconcile = AsyncMock(side_effect=outcome)
    else:
        memo.engine.reconcile = AsyncMock(return_value=outcome)
    return memo


def run(handler, memo, name, **kwargs):
    body = make_body()
    body["metadata"]["name"] = name

    async def go():
        memo.slots = asyncio.Semaphore(1)
        return await handler(
            body=body,
            name=name,
            namespace="team-a",
            meta=body["metadata"],
            memo=memo,
            logger=logger,
            **kwargs,
        )

    return asyncio.run(go())


class TestReconcile:
    """Tests for translating pass outcomes for kopf."""

    def test_ready(self):
        ready = ReconcileResult(Action.requeue(3600), Phase.READY)
        memo = make_memo(ready)
        assert run(handlers.reconcile, memo, "ready", trigger_source="create") is ready
        memo.engine.reconcile.assert_awaited_once()
        memo.sensor.on_reconcile_start.assert_called_once_with(
            "ready", "team-a", 1, "create"
        )
        args = memo.sensor.on_reconcile_complete.call_args.args
        assert args[3:] == ("Ready", True, None)

    def test_failed_pass_retries_after_failure_delay(self):
        failed = ReconcileResult(
            Action.requeue(300), Phase.FAILED, "Failed to install b: boom"
        )
        memo = make_memo(failed)
        with pytest.raises(kopf.TemporaryError, match="Failed to install b") as e:
            run(handlers.reconcile, memo, "failed", trigger_source="update")
        assert e.value.delay == 300
        args = memo.sensor.on_reconcile_complete.call_args.args
        assert args[3] == "Failed"

    def test_finalizer_error(self):
        memo = make_memo(FinalizerError("Failed to attach finalizer"))
        with pytest.raises(kopf.TemporaryError) as e:
            run(handlers.reconcile, memo, "finalizer", trigger_source="create")
        assert e.value.delay == 60

    def test_unexpected_error(self):
        memo = make_memo(RuntimeError("boom"))
        with pytest.raises(kopf.TemporaryError, match="Reconciliation failed: boom") as e:
            run(handlers.reconcile, memo, "unexpected", trigger_source="resume")
        assert e.value.delay == 60
        args = memo.sensor.on_reconcile_complete.call_args.args
        assert args[4] is False
        assert isinstance(args[5], RuntimeError)

    def test_awaiting_change(self):
        memo = make_memo(ReconcileResult(Action.await_change()))
        result = run(handlers.reconcile, memo, "released", trigger_source="delete")
        assert not result.action.is_requeue


class TestHandlers:
    """Tests for the kopf entry points."""

    def test_on_reconcile_passes_reason(self):
        memo = make_memo(ReconcileResult(Action.requeue(3600), Phase.READY))
        run(handlers.on_reconcile, memo, "on-create", reason=kopf.Reason.CREATE)
        trigger = memo.sensor.on_reconcile_start.call_args.args[3]
        assert trigger == "create"

    def test_on_delete_drops_lock(self):
        memo = make_memo(ReconcileResult(Action.await_change()))
        run(handlers.on_delete, memo, "deleted")
        assert ("team-a", "deleted") not in handlers.reconcile_locks

    def test_timer_skips_unsettled_objects(self):
        memo = make_memo(ReconcileResult(Action.requeue(3600), Phase.READY))
        run(handlers.reverify, memo, "timer-installing", status={"phase": "Installing"})
        run(handlers.reverify, memo, "timer-empty", status=None)
        memo.engine.reconcile.assert_not_awaited()
        run(handlers.reverify, memo, "timer-ready", status={"phase": "Ready"})
        memo.engine.reconcile.assert_awaited_once()

    def test_failed_timer_pass_is_retried(self):
        failed = ReconcileResult(Action.requeue(300), Phase.FAILED, "Failed to install a")
        memo = make_memo(failed)
        with pytest.raises(kopf.TemporaryError) as e:
            run(handlers.reverify, memo, "timer-retry", status={"phase": "Ready"})
        assert e.value.delay == 300

        # kopf retries the timer with the status the failed pass wrote
        memo.engine.reconcile.return_value = ReconcileResult(
            Action.requeue(3600), Phase.READY
        )
        run(handlers.reverify, memo, "timer-retry", status={"phase": "Failed"})
        assert memo.engine.reconcile.await_count == 2
        trigger = memo.sensor.on_reconcile_start.call_args.args[3]
        assert trigger == "timer"
