"""Prometheus monitoring backend for the zerg operator.

PrometheusMonitor turns operator lifecycle events into Prometheus metrics:

1. Reconcile passes - duration, outcome phase, errors
2. Dependency installs and GitOps / CI/CD provisioning - counts and latency
3. External tool invocations - counts and latency per binary
4. Status and finalizer writes
"""

import time
import logging

from prometheus_client import Counter, Histogram, Gauge

from zerg.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor for the zerg operator.

    Metric families:
    - zergop_reconcile_* - Reconcile pass metrics
    - zergop_dependency_install_* - Dependency install metrics
    - zergop_provision_* - GitOps / CI/CD provisioning metrics
    - zergop_command_* - External tool metrics
    - zergop_status_updates_total / zergop_finalizer_changes_total
    """

    def __init__(self, registry=None):
        """Initialize Prometheus metrics.

        Args:
            registry: Collector registry, the process default when None.
                Tests pass a fresh CollectorRegistry so instances don't collide.
        """
        super().__init__()
        kwargs = {"registry": registry} if registry is not None else {}

        # =============================================================================
        # Reconcile Pass Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            "zergop_reconcile_duration_seconds",
            "Time spent in a reconcile pass",
            labelnames=["name", "namespace", "trigger_source", "phase"],
            buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
            **kwargs,
        )

        self.reconcile_total = Counter(
            "zergop_reconcile_total",
            "Total number of reconcile passes",
            labelnames=["name", "namespace", "trigger_source", "phase"],
            **kwargs,
        )

        self.reconcile_errors = Counter(
            "zergop_reconcile_errors_total",
            "Total number of reconcile passes that raised",
            labelnames=["name", "namespace", "error_type"],
            **kwargs,
        )

        self.reconcile_in_progress = Gauge(
            "zergop_reconcile_in_progress",
            "Reconcile passes currently running",
            labelnames=["namespace"],
            **kwargs,
        )

        # =============================================================================
        # Dependency Install Metrics
        # =============================================================================

        self.dependency_install_duration = Histogram(
            "zergop_dependency_install_duration_seconds",
            "Time spent installing a dependency",
            labelnames=["name", "namespace", "kind", "result"],
            buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
            **kwargs,
        )

        self.dependency_install_total = Counter(
            "zergop_dependency_install_total",
            "Total number of dependency installs",
            labelnames=["name", "namespace", "dependency", "kind", "result"],
            **kwargs,
        )

        # =============================================================================
        # Provisioning Metrics
        # =============================================================================

        self.provision_duration = Histogram(
            "zergop_provision_duration_seconds",
            "Time spent provisioning GitOps or CI/CD",
            labelnames=["name", "namespace", "subsystem", "provider", "result"],
            buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
            **kwargs,
        )

        self.provision_errors = Counter(
            "zergop_provision_errors_total",
            "Total number of provisioning failures",
            labelnames=["name", "namespace", "subsystem", "provider", "error_type"],
            **kwargs,
        )

        # =============================================================================
        # Tool Invocation Metrics
        # =============================================================================

        self.command_duration = Histogram(
            "zergop_command_duration_seconds",
            "Time spent running external tools",
            labelnames=["binary", "result"],
            buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 600.0],
            **kwargs,
        )

        self.command_total = Counter(
            "zergop_command_total",
            "Total number of external tool invocations",
            labelnames=["binary", "result"],
            **kwargs,
        )

        # =============================================================================
        # Status Metrics
        # =============================================================================

        self.status_updates = Counter(
            "zergop_status_updates_total",
            "Total number of status updates",
            labelnames=["name", "namespace", "phase"],
            **kwargs,
        )

        self.finalizer_changes = Counter(
            "zergop_finalizer_changes_total",
            "Total number of finalizer attach/detach operations",
            labelnames=["name", "namespace", "action"],
            **kwargs,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    # =============================================================================
    # Reconcile Pass Hooks
    # =============================================================================

    def on_reconcile_start(self, name, namespace, generation, trigger_source):
        self.reconcile_in_progress.labels(namespace=namespace).inc()
        return {
            "start_time": time.time(),
            "trigger_source": trigger_source,
        }

    def on_reconcile_complete(
        self, name, namespace, state, phase, success, error=None
    ) -> None:
        self.reconcile_in_progress.labels(namespace=namespace).dec()
        if state:
            duration = time.time() - state["start_time"]
            labels = dict(
                name=name,
                namespace=namespace,
                trigger_source=state["trigger_source"],
                phase=phase or "none",
            )
            self.reconcile_duration.labels(**labels).observe(duration)
            self.reconcile_total.labels(**labels).inc()

        if error:
            self.reconcile_errors.labels(
                name=name,
                namespace=namespace,
                error_type=error.__class__.__name__,
            ).inc()

    # =============================================================================
    # Dependency Install Hooks
    # =============================================================================

    def on_dependency_install_start(self, name, namespace, dependency_name, kind):
        return {"start_time": time.time()}

    def on_dependency_install_complete(
        self, name, namespace, dependency_name, kind, state, success
    ) -> None:
        result = "success" if success else "failure"
        self.dependency_install_total.labels(
            name=name,
            namespace=namespace,
            dependency=dependency_name,
            kind=kind,
            result=result,
        ).inc()
        if state:
            self.dependency_install_duration.labels(
                name=name, namespace=namespace, kind=kind, result=result
            ).observe(time.time() - state["start_time"])

    # =============================================================================
    # Provisioning Hooks
    # =============================================================================

    def on_provision_start(self, name, namespace, subsystem, provider):
        return {"start_time": time.time()}

    def on_provision_complete(
        self, name, namespace, subsystem, provider, state, success, error=None
    ) -> None:
        if state:
            self.provision_duration.labels(
                name=name,
                namespace=namespace,
                subsystem=subsystem,
                provider=provider,
                result="success" if success else "failure",
            ).observe(time.time() - state["start_time"])
        if error:
            self.provision_errors.labels(
                name=name,
                namespace=namespace,
                subsystem=subsystem,
                provider=provider,
                error_type=error.__class__.__name__,
            ).inc()

    # =============================================================================
    # Tool Invocation Hooks
    # =============================================================================

    def on_command_start(self, binary):
        return {"start_time": time.time()}

    def on_command_complete(self, binary, state, success, error=None) -> None:
        result = "success" if success else "failure"
        self.command_total.labels(binary=binary, result=result).inc()
        if state:
            self.command_duration.labels(binary=binary, result=result).observe(
                time.time() - state["start_time"]
            )

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_status_update(self, name, namespace, phase) -> None:
        self.status_updates.labels(name=name, namespace=namespace, phase=phase).inc()

    def on_finalizer_change(self, name, namespace, action) -> None:
        self.finalizer_changes.labels(
            name=name, namespace=namespace, action=action
        ).inc()
