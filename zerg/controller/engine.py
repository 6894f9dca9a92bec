"""One reconcile pass over a DependencyManager object.

The engine is the only place that decides whether a pass goes on or stops.
Installers and provisioners report failures back to it (as Failed status
entries or typed errors), the engine turns them into a Failed status and a
requeue, and everything else propagates to the caller.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
from marshmallow import ValidationError
from zerg.controller.lifecycle import LifecycleState, lifecycle_state
from zerg.controller.status import (
    CICD_CONFIGURED,
    DEPENDENCIES_INSTALLED,
    GITOPS_CONFIGURED,
    StatusWriter,
)
from zerg.installers import DependencyInstaller, install_order
from zerg.provisioners import GitOpsProvisioner, PipelineProvisioner
from zerg.resources.dependencymanager import DependencyManager
from zerg.sensors import OperatorSensor
from zerg.types.models import (
    CiCdStatus,
    Dependency,
    DependencyManagerSpec,
    DependencyStatus,
    GitOpsStatus,
    Phase,
    PipelineStatus,
)
from zerg.types.schemas import DependencyManagerSpecSchema
from zerg.types.settings import Settings
from zerg.utils.command import ToolRunner
from zerg.utils.errors import (
    CiCdError,
    ConfigurationError,
    DependencyError,
    GitOpsError,
)
from zerg.utils.helpers import now

SYNC_CONFIGURED = "Configured"
SYNC_FAILED = "Failed"
PIPELINE_CREATED = "Created"
PIPELINE_FAILED = "Failed"


class ActionKind(str, Enum):
    REQUEUE = "requeue"
    AWAIT_CHANGE = "await_change"


@dataclass(frozen=True)
class Action:
    """What the control loop should do once a pass returns."""

    kind: ActionKind
    delay: Optional[float] = None

    @classmethod
    def requeue(cls, seconds: float) -> "Action":
        return cls(ActionKind.REQUEUE, seconds)

    @classmethod
    def await_change(cls) -> "Action":
        return cls(ActionKind.AWAIT_CHANGE)

    @property
    def is_requeue(self) -> bool:
        return self.kind == ActionKind.REQUEUE


@dataclass
class ReconcileResult:
    action: Action
    phase: Optional[Phase] = None
    message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.phase == Phase.FAILED


class ReconcileEngine:
    """Drives a DependencyManager toward its spec.

    Collaborators are injected so a test can swap the tool runner (and with
    it every external call) for a fake.
    """

    conf: Settings
    sensor: OperatorSensor

    def __init__(
        self,
        runner: ToolRunner,
        conf: Settings = None,
        sensor: OperatorSensor = None,
        installer: DependencyInstaller = None,
        gitops: GitOpsProvisioner = None,
        cicd: PipelineProvisioner = None,
    ) -> None:
        self.conf = conf or Settings()
        self.sensor = sensor or OperatorSensor()
        self.installer = installer or DependencyInstaller(runner, self.conf)
        self.gitops = gitops or GitOpsProvisioner(runner)
        self.cicd = cicd or PipelineProvisioner(runner)

    async def reconcile(
        self,
        body: Dict,
        resource: DependencyManager = None,
        logger: logging.Logger = None,
    ) -> ReconcileResult:
        """Run one pass according to the object's lifecycle state."""
        logger = logger or logging.getLogger(__name__)
        resource = resource or DependencyManager.from_body(body)
        state = lifecycle_state(body)
        logger.debug(
            f"Lifecycle state of {resource.namespace}/{resource.name}: {state.value}"
        )

        if state == LifecycleState.UNMANAGED:
            await resource.attach_finalizer()
            logger.info(f"Attached finalizer {resource.FINALIZER}")
            return await self.apply(body, resource, logger)
        elif state == LifecycleState.ACTIVE:
            return await self.apply(body, resource, logger)
        elif state == LifecycleState.TERMINATING:
            return await self.cleanup(resource, logger)
        return ReconcileResult(Action.await_change())

    async def cleanup(
        self, resource: DependencyManager, logger: logging.Logger
    ) -> ReconcileResult:
        """Release the object. Installed dependencies are left in place."""
        logger.info(
            f"Cleaning up DependencyManager {resource.namespace}/{resource.name}"
        )
        await resource.detach_finalizer()
        logger.info(f"Detached finalizer {resource.FINALIZER}")
        return ReconcileResult(Action.await_change())

    async def apply(
        self, body: Dict, resource: DependencyManager, logger: logging.Logger
    ) -> ReconcileResult:
        """Converge dependencies, then GitOps, then CI/CD."""
        metadata = body.get("metadata") or {}
        namespace = resource.namespace or self.conf.default_namespace
        writer = StatusWriter(
            resource, observed=body.get("status"), generation=metadata.get("generation")
        )

        try:
            spec: DependencyManagerSpec = DependencyManagerSpecSchema().load(
                body.get("spec") or {}
            )
        except ValidationError as e:
            message = f"Invalid spec: {e.messages}"
            logger.error(message)
            await writer.failed(message, reason="InvalidSpec")
            return self.failed(message)

        await writer.installing()

        try:
            dependencies = install_order(spec, self.conf.enforce_depends_on)
        except ConfigurationError as e:
            message = str(e)
            logger.error(message)
            await writer.failed(
                message, reason="InvalidSpec", step=DEPENDENCIES_INSTALLED
            )
            return self.failed(message)

        installed: List[DependencyStatus] = []
        for dependency in dependencies:
            entry = await self.install(resource, dependency, namespace)
            installed.append(entry)
            if entry.failed:
                message = str(DependencyError(dependency.name, entry.error))
                logger.error(message)
                await writer.failed(
                    message, step=DEPENDENCIES_INSTALLED, dependencies=installed
                )
                return self.failed(message)

        gitops_status = None
        if spec.gitops:
            try:
                await self.provision(
                    resource,
                    "gitops",
                    spec.gitops.provider.value,
                    self.gitops.setup(spec.gitops, namespace),
                )
            except GitOpsError as e:
                message = f"GitOps setup failed: {e}"
                logger.error(message)
                gitops_status = GitOpsStatus(
                    provider=spec.gitops.provider, sync_status=SYNC_FAILED
                )
                await writer.failed(
                    message,
                    step=GITOPS_CONFIGURED,
                    dependencies=installed,
                    gitops_status=gitops_status,
                )
                return self.failed(message)
            gitops_status = GitOpsStatus(
                provider=spec.gitops.provider,
                sync_status=SYNC_CONFIGURED,
                last_sync=now(),
            )

        cicd_status = None
        if spec.cicd:
            try:
                await self.provision(
                    resource,
                    "cicd",
                    spec.cicd.provider.value,
                    self.cicd.setup(spec.cicd, namespace),
                )
            except CiCdError as e:
                message = f"CI/CD setup failed: {e}"
                logger.error(message)
                await writer.failed(
                    message,
                    step=CICD_CONFIGURED,
                    dependencies=installed,
                    gitops_status=gitops_status,
                    cicd_status=self.pipelines_status(spec, PIPELINE_FAILED),
                )
                return self.failed(message)
            cicd_status = self.pipelines_status(spec, PIPELINE_CREATED)

        await writer.ready(installed, gitops_status, cicd_status)
        logger.info(
            f"DependencyManager {resource.namespace}/{resource.name} is ready "
            f"({len(installed)} dependencies)"
        )
        return ReconcileResult(
            Action.requeue(self.conf.steady_state_requeue_seconds),
            Phase.READY,
        )

    async def install(
        self, resource: DependencyManager, dependency: Dependency, namespace: str
    ) -> DependencyStatus:
        kind = dependency.kind.value
        state = self.sensor.on_dependency_install_start(
            resource.name, resource.namespace, dependency.name, kind
        )
        entry = await self.installer.install(dependency, namespace)
        self.sensor.on_dependency_install_complete(
            resource.name,
            resource.namespace,
            dependency.name,
            kind,
            state,
            not entry.failed,
        )
        return entry

    async def provision(
        self, resource: DependencyManager, subsystem: str, provider: str, setup
    ) -> None:
        """Await a provisioner `setup` coroutine, reporting it to the sensor."""
        state = self.sensor.on_provision_start(
            resource.name, resource.namespace, subsystem, provider
        )
        try:
            await setup
        except Exception as e:
            self.sensor.on_provision_complete(
                resource.name, resource.namespace, subsystem, provider, state, False, e
            )
            raise
        self.sensor.on_provision_complete(
            resource.name, resource.namespace, subsystem, provider, state, True
        )

    def pipelines_status(self, spec: DependencyManagerSpec, status: str) -> CiCdStatus:
        return CiCdStatus(
            provider=spec.cicd.provider,
            pipelines=[
                PipelineStatus(name=pipeline.name, status=status)
                for pipeline in spec.cicd.pipelines
            ],
        )

    def failed(self, message: str) -> ReconcileResult:
        return ReconcileResult(
            Action.requeue(self.conf.failure_requeue_seconds), Phase.FAILED, message
        )
