"""Zerg Operator Sensor Framework.

Hook-based instrumentation of operator lifecycle events.

Key components:
- OperatorSensor: Base class defining lifecycle hooks for operator events
- SensorDelegate: Fan-out pattern for routing events to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter

Usage:
    from zerg.sensors import SensorDelegate, PrometheusMonitor

    delegate = SensorDelegate()
    delegate.add(PrometheusMonitor())
"""

from zerg.sensors.base import OperatorSensor
from zerg.sensors.delegate import SensorDelegate
from zerg.sensors.prometheus import PrometheusMonitor
from zerg.sensors.server import init_metrics_server

__all__ = [
    "OperatorSensor",
    "SensorDelegate",
    "PrometheusMonitor",
    "init_metrics_server",
]
