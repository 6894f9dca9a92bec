import logging
from typing import Any, Dict
from zerg.provisioners.templates import (
    ARGOCD_NAMESPACE,
    FLUX_NAMESPACE,
    argocd_application,
    flux_git_repository,
    flux_kustomization,
    to_yaml,
)
from zerg.types.models import GitOpsConfig, GitOpsProvider
from zerg.utils.command import FLUX, KUBECTL, ToolRunner
from zerg.utils.errors import ConfigurationError, GitOpsError, ZergError

logger = logging.getLogger(__name__)

ARGOCD_INSTALL_MANIFEST = (
    "https://raw.githubusercontent.com/argoproj/argo-cd/stable/manifests/install.yaml"
)


class GitOpsProvisioner:
    """Links the reconcile namespace to a git repository through Flux or ArgoCD."""

    def __init__(self, runner: ToolRunner) -> None:
        self.runner = runner

    async def setup(self, config: GitOpsConfig, namespace: str) -> None:
        """Install the provider if needed and apply its sync objects.

        Raises:
            GitOpsError: Any step failed.
        """
        try:
            if config.provider == GitOpsProvider.FLUX:
                await self.setup_flux(config, namespace)
            elif config.provider == GitOpsProvider.ARGOCD:
                await self.setup_argocd(config, namespace)
            else:
                raise ConfigurationError(f"Unsupported GitOps provider: {config.provider}")
        except ZergError as e:
            raise GitOpsError(str(e)) from e

    async def setup_flux(self, config: GitOpsConfig, namespace: str) -> None:
        logger.info("Setting up Flux GitOps")
        check = await self.runner.run(FLUX, ["check", "--pre"])
        if check.ok:
            logger.info("Flux prerequisites satisfied")
        else:
            logger.info("Installing Flux")
            result = await self.runner.run(FLUX, ["install"])
            result.check("Flux install failed")

        result = await self.runner.run(
            FLUX,
            [
                "bootstrap",
                "git",
                "--url",
                config.repository,
                "--branch",
                config.branch,
                "--path",
                config.path,
                "--namespace",
                FLUX_NAMESPACE,
            ],
        )
        result.check("Flux bootstrap failed")

        await self.apply(
            flux_git_repository(config, namespace), "Failed to create GitRepository"
        )
        await self.apply(
            flux_kustomization(config, namespace), "Failed to create Kustomization"
        )

    async def setup_argocd(self, config: GitOpsConfig, namespace: str) -> None:
        logger.info("Setting up ArgoCD GitOps")
        await self.install_argocd()
        await self.apply(
            argocd_application(config, namespace),
            "Failed to create ArgoCD Application",
        )

    async def install_argocd(self) -> None:
        if await self.runner.ensure_namespace(ARGOCD_NAMESPACE):
            logger.info(f"Created {ARGOCD_NAMESPACE} namespace")
        result = await self.runner.run(
            KUBECTL, ["apply", "-n", ARGOCD_NAMESPACE, "-f", ARGOCD_INSTALL_MANIFEST]
        )
        result.check("ArgoCD install failed")

    async def apply(self, document: Dict[str, Any], message: str) -> None:
        result = await self.runner.apply(to_yaml(document))
        result.check(message)
