import asyncio
import kopf
import logging
import zerg.handlers.dependencymanager as dependencymanager
import zerg.handlers.probes as probes
from zerg.controller import ReconcileEngine
from zerg.types.settings import Settings
from zerg.resources import BaseResource, DependencyManager
from zerg.sensors import init_metrics_server, SensorDelegate, PrometheusMonitor
from zerg.utils.command import SubprocessToolRunner
from kubernetes_asyncio import config
from kubernetes_asyncio.client.api_client import ApiClient


@kopf.on.startup()
async def setup(
    settings: kopf.OperatorSettings, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    # Load Kubernetes config - try in-cluster first (for production), then local kubeconfig (for dev)
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        logger.info("In-cluster config not found, trying local kubeconfig")
        try:
            await config.load_kube_config()
            logger.info("Loaded local Kubernetes configuration")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    memo.conf = Settings()

    # Create a shared ApiClient for all resources to prevent connection leaks
    shared_client = ApiClient()
    BaseResource.shared_api_client = shared_client
    logger.info("Shared Kubernetes API client initialized")

    sensor_delegate = SensorDelegate()
    if memo.conf.metrics_enabled:
        sensor_delegate.add(PrometheusMonitor())
    memo.sensor = sensor_delegate
    DependencyManager.sensor = sensor_delegate
    logger.info(f"Sensor infrastructure initialized with {len(sensor_delegate)} sensors")

    if memo.conf.metrics_enabled:
        try:
            init_metrics_server(memo.conf.metrics_port)
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            # Don't fail operator startup if metrics server fails
            logger.warning("Continuing without metrics server")

    runner = SubprocessToolRunner(
        timeout=memo.conf.command_timeout_seconds, sensor=sensor_delegate
    )
    memo.engine = ReconcileEngine(runner, conf=memo.conf, sensor=sensor_delegate)
    memo.slots = asyncio.Semaphore(memo.conf.max_concurrent_reconciles)

    # Limit the number of concurrent workers to prevent flooding the API
    settings.batching.worker_limit = memo.conf.max_concurrent_reconciles

    # Post events to the Kubernetes API for logging >= Warning
    settings.posting.enabled = True
    settings.posting.level = logging.WARNING


@kopf.on.cleanup()
async def cleanup(logger: logging.Logger, **kwargs):
    """Cleanup handler for operator shutdown."""
    logger.info("Shutting down operator...")

    if BaseResource.shared_api_client:
        await BaseResource.shared_api_client.close()
        BaseResource.shared_api_client = None
        logger.info("Shared API client closed")

    logger.info("Operator shutdown complete")


__all__ = [
    "dependencymanager",
    "probes",
]
