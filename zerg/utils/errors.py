import json
import kubernetes_asyncio

_NOT_FOUND = "notfound"


class ZergError(Exception):
    """Generic base exception used by the operator."""


class ConfigurationError(ZergError):
    """Raised when a declared resource is missing a required field or is invalid."""


class SerializationError(ConfigurationError):
    """Raised when a document (e.g. Helm values) cannot be rendered."""


class CommandError(ZergError):
    """Raised when an external tool exits non-zero, cannot start or times out."""


class ClusterApiError(ZergError):
    """Raised when the cluster API rejects a request."""

    def __init__(self, message: str, status: int = None) -> None:
        super().__init__(message)
        self.status = status


class FinalizerError(ZergError):
    """Raised when the finalizer marker cannot be attached or detached."""


class DependencyError(ZergError):
    """Raised when a dependency cannot be installed."""

    def __init__(self, dependency_name: str, message: str) -> None:
        super().__init__(f"Failed to install {dependency_name}: {message}")
        self.dependency_name = dependency_name


class GitOpsError(ZergError):
    """Raised when GitOps provisioning fails."""


class CiCdError(ZergError):
    """Raised when CI/CD provisioning fails."""


def _reason(ex: kubernetes_asyncio.client.ApiException) -> str:
    try:
        err = json.loads(ex.body)
    except (TypeError, ValueError):
        return ""
    return err.get("reason", "").lower() if isinstance(err, dict) else ""


def not_found_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    else:
        return ex.status == 404 or _reason(ex) == _NOT_FOUND


def api_error_message(ex: kubernetes_asyncio.client.ApiException) -> str:
    """Human readable message for an ApiException."""
    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (json.JSONDecodeError, AttributeError, TypeError):
        pass
    return error_msg


def to_cluster_api_error(ex: kubernetes_asyncio.client.ApiException) -> ClusterApiError:
    return ClusterApiError(api_error_message(ex), status=ex.status)

