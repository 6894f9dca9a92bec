from typing import Dict, List, Optional
from kubernetes_asyncio.client import ApiException
from zerg.resources.base import BaseResource
from zerg.sensors import OperatorSensor
from zerg.utils.errors import (
    FinalizerError,
    api_error_message,
    not_found_error,
    to_cluster_api_error,
)


class DependencyManager(BaseResource):
    """Cluster-side handle on one DependencyManager object.

    Carries the identity of the object (name, namespace) and the finalizers
    last observed on it. All writes go through merge patches: the status
    through the status subresource, finalizers through object metadata.
    """

    KIND = "DependencyManager"
    GROUP_NAME = "zerg.io"
    GROUP_VERSION = "v1"
    PLURAL_NAME = "dependencymanagers"
    FINALIZER = "zerg.io/finalizer"

    sensor: OperatorSensor = None

    name: str
    namespace: str
    finalizers: List[str]

    def __init__(
        self, name: str, namespace: str, finalizers: Optional[List[str]] = None
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.finalizers = list(finalizers or [])

    @classmethod
    def from_body(cls, body: Dict) -> "DependencyManager":
        metadata = body.get("metadata") or {}
        return cls(
            name=metadata.get("name"),
            namespace=metadata.get("namespace"),
            finalizers=metadata.get("finalizers"),
        )

    @property
    def has_finalizer(self) -> bool:
        return self.FINALIZER in self.finalizers

    async def patch_status(self, status: Dict) -> None:
        """Merge-patch the status subresource."""
        try:
            await self.patch_custom_object_status(
                self.custom_objects_api,
                namespace=self.namespace,
                group=self.GROUP_NAME,
                version=self.GROUP_VERSION,
                plural=self.PLURAL_NAME,
                name=self.name,
                body={"status": status},
            )
        except ApiException as ex:
            raise to_cluster_api_error(ex) from ex
        if self.sensor and status.get("phase"):
            self.sensor.on_status_update(self.name, self.namespace, status["phase"])

    async def attach_finalizer(self) -> None:
        if self.has_finalizer:
            return
        await self._patch_finalizers(self.finalizers + [self.FINALIZER], "attach")

    async def detach_finalizer(self) -> None:
        if not self.has_finalizer:
            return
        remaining = [f for f in self.finalizers if f != self.FINALIZER]
        try:
            await self._patch_finalizers(remaining, "detach")
        except FinalizerError as ex:
            # Object already gone, nothing left to release.
            if not_found_error(ex.__cause__):
                self.finalizers = remaining
                return
            raise

    async def _patch_finalizers(self, finalizers: List[str], action: str) -> None:
        try:
            await self.patch_custom_object(
                self.custom_objects_api,
                namespace=self.namespace,
                group=self.GROUP_NAME,
                version=self.GROUP_VERSION,
                plural=self.PLURAL_NAME,
                name=self.name,
                body={"metadata": {"finalizers": finalizers}},
            )
        except ApiException as ex:
            raise FinalizerError(
                f"Failed to {action} finalizer {self.FINALIZER}: {api_error_message(ex)}"
            ) from ex
        self.finalizers = finalizers
        if self.sensor:
            self.sensor.on_finalizer_change(self.name, self.namespace, action)
