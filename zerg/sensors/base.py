"""Hooks for observing what the operator does.

OperatorSensor declares one hook per event of interest, each a no-op, so a
backend overrides just the events it reports on.

Paired events (`on_X_start` / `on_X_complete`) hand state across: whatever
the start hook returns is given back to the matching complete hook, which
lets a backend time the operation in between.
"""

from typing import Dict, Optional, Any


class OperatorSensor:
    """Base sensor class for zerg operator monitoring.

    Hooks cover four categories:
    1. Reconcile passes
    2. Dependency installs
    3. GitOps / CI/CD provisioning
    4. External tool invocations and status writes

    All methods are no-ops by default.
    """

    # =============================================================================
    # Reconcile Pass Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        name: str,
        namespace: str,
        generation: int,
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        """Called when a reconcile pass begins.

        Args:
            name: DependencyManager resource name
            namespace: Kubernetes namespace
            generation: Resource generation number
            trigger_source: What triggered the pass (create, update, resume, timer, delete)

        Returns:
            Optional state dict passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        phase: Optional[str],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called when a reconcile pass completes.

        Args:
            name: DependencyManager resource name
            namespace: Kubernetes namespace
            state: State dict returned from on_reconcile_start
            phase: Phase the pass ended in, None when no status was written
            success: Whether the pass ended without an unexpected error
            error: Exception if the pass raised
        """
        pass

    # =============================================================================
    # Dependency Install Hooks
    # =============================================================================

    def on_dependency_install_start(
        self,
        name: str,
        namespace: str,
        dependency_name: str,
        kind: str,
    ) -> Optional[Dict[str, Any]]:
        """Called before a dependency is dispatched."""
        pass

    def on_dependency_install_complete(
        self,
        name: str,
        namespace: str,
        dependency_name: str,
        kind: str,
        state: Optional[Dict[str, Any]],
        success: bool,
    ) -> None:
        """Called with the outcome of a dependency install."""
        pass

    # =============================================================================
    # Provisioning Hooks
    # =============================================================================

    def on_provision_start(
        self,
        name: str,
        namespace: str,
        subsystem: str,
        provider: str,
    ) -> Optional[Dict[str, Any]]:
        """Called before GitOps or CI/CD provisioning.

        Args:
            subsystem: "gitops" or "cicd"
            provider: Provider name (flux, argocd, tekton, argo-workflows)
        """
        pass

    def on_provision_complete(
        self,
        name: str,
        namespace: str,
        subsystem: str,
        provider: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called with the outcome of GitOps or CI/CD provisioning."""
        pass

    # =============================================================================
    # Tool Invocation Hooks
    # =============================================================================

    def on_command_start(self, binary: str) -> Optional[Dict[str, Any]]:
        """Called before an external tool runs."""
        pass

    def on_command_complete(
        self,
        binary: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Called after an external tool ran (or failed to start)."""
        pass

    # =============================================================================
    # Status Hooks
    # =============================================================================

    def on_status_update(self, name: str, namespace: str, phase: str) -> None:
        """Called after a status patch was accepted."""
        pass

    def on_finalizer_change(self, name: str, namespace: str, action: str) -> None:
        """Called after the finalizer was attached or detached.

        Args:
            action: "attach" or "detach"
        """
        pass
