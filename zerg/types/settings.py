import os
import tempfile
from typing import Any

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Seconds to wait before retrying a pass that ended in the Failed phase
FAILURE_REQUEUE_SECONDS = float(_getenv("FAILURE_REQUEUE_SECONDS", 300))

#: Seconds between re-verification passes of a Ready resource
STEADY_STATE_REQUEUE_SECONDS = float(_getenv("STEADY_STATE_REQUEUE_SECONDS", 3600))

#: Seconds to wait before retrying a pass that raised an unexpected error
ERROR_REQUEUE_SECONDS = float(_getenv("ERROR_REQUEUE_SECONDS", 60))

#: Maximum number of DependencyManager resources reconciled at the same time
MAX_CONCURRENT_RECONCILES = int(_getenv("MAX_CONCURRENT_RECONCILES", 5))

#: Timeout in seconds for a single external tool invocation
COMMAND_TIMEOUT_SECONDS = float(_getenv("COMMAND_TIMEOUT_SECONDS", 600))

#: Directory where transient Helm values files are written
HELM_VALUES_DIR = _getenv("HELM_VALUES_DIR", tempfile.gettempdir())

#: Order dependencies by their dependsOn declarations instead of declaration order
ENFORCE_DEPENDS_ON = bool(_getenv("ENFORCE_DEPENDS_ON", False))

#: Namespace used when a resource carries none
DEFAULT_NAMESPACE = _getenv("DEFAULT_NAMESPACE", "zerg-system")

#: Expose Prometheus metrics
METRICS_ENABLED = bool(_getenv("METRICS_ENABLED", True))

#: Port of the Prometheus metrics endpoint
METRICS_PORT = int(_getenv("METRICS_PORT", 8080))


class Settings:
    """Operator settings"""

    failure_requeue_seconds: float = FAILURE_REQUEUE_SECONDS
    steady_state_requeue_seconds: float = STEADY_STATE_REQUEUE_SECONDS
    error_requeue_seconds: float = ERROR_REQUEUE_SECONDS
    max_concurrent_reconciles: int = MAX_CONCURRENT_RECONCILES
    command_timeout_seconds: float = COMMAND_TIMEOUT_SECONDS
    helm_values_dir: str = HELM_VALUES_DIR
    enforce_depends_on: bool = ENFORCE_DEPENDS_ON
    default_namespace: str = DEFAULT_NAMESPACE
    metrics_enabled: bool = METRICS_ENABLED
    metrics_port: int = METRICS_PORT

    def __init__(
        self,
        *args,
        failure_requeue_seconds: float = None,
        steady_state_requeue_seconds: float = None,
        error_requeue_seconds: float = None,
        max_concurrent_reconciles: int = None,
        command_timeout_seconds: float = None,
        helm_values_dir: str = None,
        enforce_depends_on: bool = None,
        default_namespace: str = None,
        metrics_enabled: bool = None,
        metrics_port: int = None,
        **kwargs,
    ):
        if failure_requeue_seconds is not None:
            self.failure_requeue_seconds = failure_requeue_seconds

        if steady_state_requeue_seconds is not None:
            self.steady_state_requeue_seconds = steady_state_requeue_seconds

        if error_requeue_seconds is not None:
            self.error_requeue_seconds = error_requeue_seconds

        if max_concurrent_reconciles is not None:
            self.max_concurrent_reconciles = max_concurrent_reconciles

        if command_timeout_seconds is not None:
            self.command_timeout_seconds = command_timeout_seconds

        if helm_values_dir is not None:
            self.helm_values_dir = helm_values_dir

        if enforce_depends_on is not None:
            self.enforce_depends_on = enforce_depends_on

        if default_namespace is not None:
            self.default_namespace = default_namespace

        if metrics_enabled is not None:
            self.metrics_enabled = metrics_enabled

        if metrics_port is not None:
            self.metrics_port = metrics_port
