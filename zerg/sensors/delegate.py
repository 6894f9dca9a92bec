"""Sensor delegation for fan-out pattern.

SensorDelegate routes every lifecycle event to each registered backend.
Each backend keeps its own state dict for start/complete hook pairs, and an
exception raised by one backend is logged without affecting the others or
the reconcile pass that emitted the event.
"""

from typing import Set, Dict, Optional, Any
import logging

from zerg.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    Example:
        delegate = SensorDelegate()
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("deps", "default", 3, "update")
        delegate.on_reconcile_complete("deps", "default", state, "Ready", True)
    """

    def __init__(self) -> None:
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: OperatorSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def __len__(self) -> int:
        return len(self._sensors)

    def _start(self, hook: str, *args) -> Optional[Dict[OperatorSensor, Any]]:
        """Call a start hook on every sensor, collecting per-sensor state."""
        if not self._sensors:
            return None
        states = {}
        for sensor in self._sensors:
            try:
                state = getattr(sensor, hook)(*args)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )
        return states if states else None

    def _each(self, hook: str, *args, **kwargs) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    def _complete(
        self, hook: str, state: Optional[Dict[OperatorSensor, Any]], *args, **kwargs
    ) -> None:
        """Call a complete hook, handing each sensor the state it returned."""
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                getattr(sensor, hook)(*args, sensor_state, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Reconcile Pass Hooks
    # =============================================================================

    def on_reconcile_start(self, name, namespace, generation, trigger_source):
        return self._start(
            "on_reconcile_start", name, namespace, generation, trigger_source
        )

    def on_reconcile_complete(
        self, name, namespace, state, phase, success, error=None
    ) -> None:
        self._complete(
            "on_reconcile_complete",
            state,
            name,
            namespace,
            phase=phase,
            success=success,
            error=error,
        )

    # =============================================================================
    # Dependency Install Hooks
    # =============================================================================

    def on_dependency_install_start(self, name, namespace, dependency_name, kind):
        return self._start(
            "on_dependency_install_start", name, namespace, dependency_name, kind
        )

    def on_dependency_install_complete(
        self, name, namespace, dependency_name, kind, state, success
    ) -> None:
        self._complete(
            "on_dependency_install_complete",
            state,
            name,
            namespace,
            dependency_name,
            kind,
            success=success,
        )

    # =============================================================================
    # Provisioning Hooks
    # =============================================================================

    def on_provision_start(self, name, namespace, subsystem, provider):
        return self._start("on_provision_start", name, namespace, subsystem, provider)

    def on_provision_complete(
        self, name, namespace, subsystem, provider, state, success, error=None
    ) -> None:
        self._complete(
            "on_provision_complete",
            state,
            name,
            namespace,
            subsystem,
            provider,
            success=success,
            error=error,
        )

    # =============================================================================
    # Tool Invocation Hooks
    # =============================================================================

    def on_command_start(self, binary):
        return self._start("on_command_start", binary)

    def on_command_complete(self, binary, state, success, error=None) -> None:
        self._complete(
            "on_command_complete", state, binary, success=success, error=error
        )

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_status_update(self, name, namespace, phase) -> None:
        self._each("on_status_update", name, namespace, phase)

    def on_finalizer_change(self, name, namespace, action) -> None:
        self._each("on_finalizer_change", name, namespace, action)
