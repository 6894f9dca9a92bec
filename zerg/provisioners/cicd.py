import logging
from zerg.provisioners.templates import (
    argo_cron_workflow,
    argo_workflow_template,
    tekton_event_listener,
    tekton_pipeline,
    tekton_trigger_binding,
    tekton_trigger_template,
    to_yaml,
)
from zerg.types.models import CiCdConfig, CiCdProvider, Pipeline
from zerg.utils.command import KUBECTL, ToolRunner
from zerg.utils.errors import CiCdError, CommandError, ConfigurationError, ZergError

logger = logging.getLogger(__name__)

TEKTON_NAMESPACE = "tekton-pipelines"
TEKTON_PIPELINE_RELEASE = (
    "https://storage.googleapis.com/tekton-releases/pipeline/latest/release.yaml"
)
TEKTON_DASHBOARD_RELEASE = (
    "https://storage.googleapis.com/tekton-releases/dashboard/latest/release.yaml"
)

ARGO_NAMESPACE = "argo"
ARGO_WORKFLOWS_INSTALL_MANIFEST = (
    "https://github.com/argoproj/argo-workflows/releases/latest/download/install.yaml"
)


class PipelineProvisioner:
    """Installs a CI/CD engine and declares the configured pipelines in it."""

    def __init__(self, runner: ToolRunner) -> None:
        self.runner = runner

    async def setup(self, config: CiCdConfig, namespace: str) -> None:
        """Install the provider if needed and apply every pipeline.

        Raises:
            CiCdError: Any step failed.
        """
        try:
            if config.provider == CiCdProvider.TEKTON:
                await self.setup_tekton(config, namespace)
            elif config.provider == CiCdProvider.ARGO_WORKFLOWS:
                await self.setup_argo_workflows(config, namespace)
            else:
                raise ConfigurationError(f"Unsupported CI/CD provider: {config.provider}")
        except ZergError as e:
            raise CiCdError(str(e)) from e

    # ------------------------------------------------
    # ---- Tekton ----
    # ------------------------------------------------

    async def setup_tekton(self, config: CiCdConfig, namespace: str) -> None:
        logger.info("Setting up Tekton CI/CD")
        await self.install_tekton()
        for pipeline in config.pipelines:
            await self.create_tekton_pipeline(pipeline, namespace)

    async def install_tekton(self) -> None:
        if await self.runner.namespace_exists(TEKTON_NAMESPACE):
            logger.info("Tekton already installed")
            return
        logger.info("Installing Tekton Pipelines")
        result = await self.runner.run(KUBECTL, ["apply", "-f", TEKTON_PIPELINE_RELEASE])
        result.check("Tekton install failed")
        try:
            dashboard = await self.runner.run(
                KUBECTL, ["apply", "-f", TEKTON_DASHBOARD_RELEASE]
            )
        except CommandError as e:
            logger.warning(f"Failed to install Tekton Dashboard (optional): {e}")
            return
        if dashboard.ok:
            logger.info("Tekton Dashboard installed")
        else:
            logger.warning(
                f"Failed to install Tekton Dashboard (optional): {dashboard.stderr.strip()}"
            )

    async def create_tekton_pipeline(self, pipeline: Pipeline, namespace: str) -> None:
        logger.info(f"Creating Tekton pipeline: {pipeline.name}")
        result = await self.runner.apply(to_yaml(tekton_pipeline(pipeline, namespace)))
        result.check(f"Failed to create Tekton pipeline {pipeline.name}")
        if pipeline.trigger.git:
            result = await self.runner.apply(
                to_yaml(
                    tekton_trigger_binding(pipeline, namespace),
                    tekton_trigger_template(pipeline, namespace),
                    tekton_event_listener(pipeline, namespace),
                )
            )
            result.check(f"Failed to create Tekton triggers for {pipeline.name}")

    # ------------------------------------------------
    # ---- Argo Workflows ----
    # ------------------------------------------------

    async def setup_argo_workflows(self, config: CiCdConfig, namespace: str) -> None:
        logger.info("Setting up Argo Workflows CI/CD")
        await self.install_argo_workflows()
        for pipeline in config.pipelines:
            await self.create_argo_workflow(pipeline, namespace)

    async def install_argo_workflows(self) -> None:
        if await self.runner.namespace_exists(ARGO_NAMESPACE):
            logger.info("Argo Workflows already installed")
            return
        logger.info("Installing Argo Workflows")
        result = await self.runner.run(KUBECTL, ["create", "namespace", ARGO_NAMESPACE])
        result.check(
            f"Failed to create {ARGO_NAMESPACE} namespace", tolerate_already_exists=True
        )
        result = await self.runner.run(
            KUBECTL,
            ["apply", "-n", ARGO_NAMESPACE, "-f", ARGO_WORKFLOWS_INSTALL_MANIFEST],
        )
        result.check("Argo Workflows install failed")

    async def create_argo_workflow(self, pipeline: Pipeline, namespace: str) -> None:
        logger.info(f"Creating Argo Workflow: {pipeline.name}")
        result = await self.runner.apply(
            to_yaml(argo_workflow_template(pipeline, namespace))
        )
        result.check(f"Failed to create WorkflowTemplate {pipeline.name}")
        if pipeline.trigger.schedule:
            result = await self.runner.apply(
                to_yaml(argo_cron_workflow(pipeline, namespace))
            )
            result.check(f"Failed to create CronWorkflow {pipeline.name}-cron")
