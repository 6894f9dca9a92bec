"""Unit tests for the DependencyManager resource handle."""

import asyncio
import pytest
from unittest.mock import AsyncMock, Mock
from kubernetes_asyncio.client import ApiException
from zerg.resources import DependencyManager
from zerg.utils.errors import ClusterApiError, FinalizerError

FINALIZER = DependencyManager.FINALIZER


@pytest.fixture
def api():
    return Mock(
        patch_namespaced_custom_object=AsyncMock(),
        patch_namespaced_custom_object_status=AsyncMock(),
    )


def handle(api, finalizers=None, sensor=None):
    dm = DependencyManager("deps", "team-a", finalizers=finalizers)
    dm.custom_objects_api = api
    dm.sensor = sensor
    return dm


class TestFromBody:
    """Tests for DependencyManager.from_body()."""

    def test_identity(self):
        dm = DependencyManager.from_body(
            {"metadata": {"name": "deps", "namespace": "team-a", "finalizers": [FINALIZER]}}
        )
        assert (dm.name, dm.namespace) == ("deps", "team-a")
        assert dm.has_finalizer

    def test_no_finalizers(self):
        dm = DependencyManager.from_body({"metadata": {"name": "deps"}})
        assert dm.finalizers == []
        assert not dm.has_finalizer


class TestPatchStatus:
    """Tests for DependencyManager.patch_status()."""

    def test_patches_status_subresource(self, api):
        sensor = Mock()
        dm = handle(api, sensor=sensor)
        asyncio.run(dm.patch_status({"phase": "Ready"}))
        api.patch_namespaced_custom_object_status.assert_awaited_once_with(
            group="zerg.io",
            version="v1",
            namespace="team-a",
            plural="dependencymanagers",
            name="deps",
            body={"status": {"phase": "Ready"}},
        )
        sensor.on_status_update.assert_called_once_with("deps", "team-a", "Ready")

    def test_api_error(self, api):
        api.patch_namespaced_custom_object_status.side_effect = ApiException(
            status=409, reason="Conflict"
        )
        with pytest.raises(ClusterApiError, match="Kubernetes API error \\(409\\): Conflict") as e:
            asyncio.run(handle(api).patch_status({"phase": "Ready"}))
        assert e.value.status == 409


class TestFinalizer:
    """Tests for attach_finalizer() and detach_finalizer()."""

    def test_attach(self, api):
        sensor = Mock()
        dm = handle(api, finalizers=["other.io/keep"], sensor=sensor)
        asyncio.run(dm.attach_finalizer())
        body = api.patch_namespaced_custom_object.call_args.kwargs["body"]
        assert body == {"metadata": {"finalizers": ["other.io/keep", FINALIZER]}}
        assert dm.has_finalizer
        sensor.on_finalizer_change.assert_called_once_with("deps", "team-a", "attach")

    def test_attach_is_idempotent(self, api):
        dm = handle(api, finalizers=[FINALIZER])
        asyncio.run(dm.attach_finalizer())
        api.patch_namespaced_custom_object.assert_not_awaited()

    def test_detach_keeps_foreign_finalizers(self, api):
        dm = handle(api, finalizers=["other.io/keep", FINALIZER])
        asyncio.run(dm.detach_finalizer())
        body = api.patch_namespaced_custom_object.call_args.kwargs["body"]
        assert body == {"metadata": {"finalizers": ["other.io/keep"]}}
        assert not dm.has_finalizer

    def test_detach_without_finalizer(self, api):
        asyncio.run(handle(api).detach_finalizer())
        api.patch_namespaced_custom_object.assert_not_awaited()

    def test_detach_object_gone(self, api):
        api.patch_namespaced_custom_object.side_effect = ApiException(
            status=404, reason="Not Found"
        )
        dm = handle(api, finalizers=[FINALIZER])
        asyncio.run(dm.detach_finalizer())
        assert not dm.has_finalizer

    def test_attach_failure(self, api):
        api.patch_namespaced_custom_object.side_effect = ApiException(
            status=403, reason="Forbidden"
        )
        dm = handle(api)
        with pytest.raises(FinalizerError, match="Failed to attach finalizer zerg.io/finalizer"):
            asyncio.run(dm.attach_finalizer())
        assert not dm.has_finalizer
