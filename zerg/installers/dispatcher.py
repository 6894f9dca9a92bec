"""Installing a single dependency with the tool matching its kind.

Every handler implements `apply(dependency, namespace)` and returns the
version string recorded in status. `DependencyInstaller.install` wraps the
handler call so that failures come back as a Failed `DependencyStatus`
instead of an exception.
"""

import logging
import os
import tempfile
import yaml
from abc import ABC, abstractmethod
from typing import Dict, Optional
from zerg.installers.operators import OperatorRelease, lookup_operator
from zerg.types.models import (
    Dependency,
    DependencyKind,
    DependencyStatus,
    DependencyInstallStatus,
)
from zerg.types.settings import Settings
from zerg.utils.command import HELM, KUBECTL, ToolRunner
from zerg.utils.errors import ConfigurationError, SerializationError
from zerg.utils.helpers import now

logger = logging.getLogger(__name__)


class DependencyHandler(ABC):
    """Installs dependencies of one kind."""

    runner: ToolRunner
    conf: Settings

    def __init__(self, runner: ToolRunner, conf: Settings = None) -> None:
        self.runner = runner
        self.conf = conf or Settings()

    @abstractmethod
    async def apply(self, dependency: Dependency, namespace: str) -> str:
        """Install or upgrade `dependency`, returning its version."""


class HelmHandler(DependencyHandler):
    LATEST = "latest"

    async def apply(self, dependency: Dependency, namespace: str) -> str:
        chart = dependency.source.chart
        if not chart:
            raise ConfigurationError(
                "Chart name required for Helm dependency: source.chart is not set"
            )
        await self.add_repo(dependency.name, dependency.source.repo)
        await self.upgrade_install(
            dependency.name,
            f"{dependency.name}/{chart}",
            dependency.target_namespace(namespace),
            version=dependency.version,
            values=dependency.values,
        )
        return dependency.version or self.LATEST

    async def add_repo(self, name: str, url: str) -> None:
        result = await self.runner.run(HELM, ["repo", "add", name, url, "--force-update"])
        result.check("Failed to add Helm repo")
        result = await self.runner.run(HELM, ["repo", "update", name])
        result.check("Failed to update Helm repo")

    async def upgrade_install(
        self,
        release: str,
        chart_ref: str,
        namespace: str,
        version: Optional[str] = None,
        values: Optional[Dict] = None,
    ) -> None:
        args = [
            "upgrade",
            "--install",
            release,
            chart_ref,
            "--namespace",
            namespace,
            "--create-namespace",
        ]
        if version:
            args += ["--version", version]
        values_file = self.write_values(release, values) if values else None
        if values_file:
            args += ["--values", values_file]
        try:
            result = await self.runner.run(HELM, args)
        finally:
            if values_file:
                self.remove_values(values_file)
        result.check("Helm install failed")

    def write_values(self, release: str, values: Dict) -> str:
        """Render values to a transient file passed to helm with --values.

        Each call gets its own file, so passes over different resources that
        install a release of the same name never share values.
        """
        try:
            document = yaml.safe_dump(values, default_flow_style=False)
        except yaml.YAMLError as e:
            raise SerializationError(f"Failed to serialize values: {e}") from e
        try:
            fd, path = tempfile.mkstemp(
                prefix=f"values-{release}-",
                suffix=".yaml",
                dir=self.conf.helm_values_dir,
            )
        except OSError as e:
            raise SerializationError(f"Failed to create values file: {e}") from e
        try:
            with os.fdopen(fd, "w") as f:
                f.write(document)
        except OSError as e:
            self.remove_values(path)
            raise SerializationError(f"Failed to write values file: {e}") from e
        return path

    def remove_values(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


class KustomizeHandler(DependencyHandler):
    APPLIED = "applied"

    async def apply(self, dependency: Dependency, namespace: str) -> str:
        path = dependency.source.path or dependency.source.repo
        result = await self.runner.run(
            KUBECTL,
            [
                "apply",
                "-k",
                path,
                "--namespace",
                dependency.target_namespace(namespace),
            ],
        )
        result.check("Kustomize apply failed")
        return self.APPLIED


class YamlHandler(DependencyHandler):
    APPLIED = "applied"

    async def apply(self, dependency: Dependency, namespace: str) -> str:
        result = await self.runner.run(
            KUBECTL,
            [
                "apply",
                "-f",
                dependency.source.repo,
                "--namespace",
                dependency.target_namespace(namespace),
            ],
        )
        result.check("YAML apply failed")
        return self.APPLIED


class OperatorHandler(DependencyHandler):
    """Installs well-known operators from fixed releases.

    Unknown operator names fall back to Helm when a chart is declared,
    otherwise to a plain manifest apply.
    """

    INSTALLED = "installed"

    helm: HelmHandler
    manifests: YamlHandler

    def __init__(
        self,
        runner: ToolRunner,
        conf: Settings = None,
        helm: HelmHandler = None,
        manifests: YamlHandler = None,
    ) -> None:
        super().__init__(runner, conf)
        self.helm = helm or HelmHandler(runner, self.conf)
        self.manifests = manifests or YamlHandler(runner, self.conf)

    async def apply(self, dependency: Dependency, namespace: str) -> str:
        release = lookup_operator(dependency.name)
        if release is not None:
            await self.install_release(release)
            return self.INSTALLED
        logger.warning(
            f"Unknown operator: {dependency.name}, attempting generic installation"
        )
        if dependency.source.chart:
            return await self.helm.apply(dependency, namespace)
        return await self.manifests.apply(dependency, namespace)

    async def install_release(self, release: OperatorRelease) -> None:
        logger.info(f"Installing operator {release.release} from {release.chart_ref}")
        await self.helm.add_repo(release.repo_name, release.repo_url)
        await self.helm.upgrade_install(
            release.release, release.chart_ref, release.namespace
        )


class DependencyInstaller:
    """Dispatches dependencies to the handler registered for their kind."""

    handlers: Dict[DependencyKind, DependencyHandler]

    def __init__(self, runner: ToolRunner, conf: Settings = None) -> None:
        conf = conf or Settings()
        helm = HelmHandler(runner, conf)
        manifests = YamlHandler(runner, conf)
        self.handlers = {}
        self.register(DependencyKind.HELM, helm)
        self.register(DependencyKind.KUSTOMIZE, KustomizeHandler(runner, conf))
        self.register(DependencyKind.YAML, manifests)
        self.register(
            DependencyKind.OPERATOR,
            OperatorHandler(runner, conf, helm=helm, manifests=manifests),
        )

    def register(self, kind: DependencyKind, handler: DependencyHandler) -> None:
        """Route dependencies of `kind` to `handler`, replacing any previous one."""
        self.handlers[kind] = handler

    async def install(self, dependency: Dependency, namespace: str) -> DependencyStatus:
        """Install `dependency`, capturing any failure in the returned status."""
        logger.info(
            f"Installing dependency: {dependency.name} of type: {dependency.kind.value}"
        )
        handler = self.handlers.get(dependency.kind)
        try:
            if handler is None:
                raise ConfigurationError(
                    f"Unsupported dependency type: {dependency.kind}"
                )
            version = await handler.apply(dependency, namespace)
        except Exception as e:
            logger.warning(f"Failed to install dependency {dependency.name}: {e}")
            return DependencyStatus(
                name=dependency.name,
                status=DependencyInstallStatus.FAILED,
                last_updated=now(),
                error=str(e) or e.__class__.__name__,
            )
        logger.info(f"Installed dependency {dependency.name} ({version})")
        return DependencyStatus(
            name=dependency.name,
            status=DependencyInstallStatus.INSTALLED,
            version=version,
            last_updated=now(),
        )
