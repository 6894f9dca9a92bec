"""Shared fixtures for zerg unit tests."""

import yaml
import pytest
from typing import List, Optional
from unittest.mock import AsyncMock
from zerg.resources import DependencyManager
from zerg.types.settings import Settings
from zerg.utils.command import CommandResult, ToolRunner


class RecordingRunner(ToolRunner):
    """ToolRunner that records every invocation instead of running it.

    Invocations succeed unless scripted otherwise with `fail_on`. Namespace
    lookups (`kubectl get namespace`) succeed only for names in `namespaces`.
    """

    def __init__(self, namespaces=None):
        self.calls = []
        self.failures = []
        self.namespaces = set(namespaces or [])

    def fail_on(self, *words: str, stderr: str = "boom", returncode: int = 1):
        """Fail every invocation whose command line contains all `words`."""
        self.failures.append((words, stderr, returncode))

    async def run(
        self, binary: str, args: List[str], stdin: Optional[str] = None
    ) -> CommandResult:
        cmd = [binary, *args]
        self.calls.append((cmd, stdin))
        line = " ".join(cmd)
        for words, stderr, returncode in self.failures:
            if all(word in line for word in words):
                return CommandResult(cmd=cmd, returncode=returncode, stderr=stderr)
        if args[:2] == ["get", "namespace"]:
            found = args[2] in self.namespaces
            return CommandResult(
                cmd=cmd,
                returncode=0 if found else 1,
                stderr="" if found else f'namespaces "{args[2]}" not found',
            )
        return CommandResult(cmd=cmd, returncode=0)

    @property
    def commands(self) -> List[str]:
        return [" ".join(cmd) for cmd, _ in self.calls]

    @property
    def applied(self) -> List[dict]:
        """Documents piped to `kubectl apply -f -`, in order."""
        documents = []
        for _, stdin in self.calls:
            if stdin:
                documents.extend(d for d in yaml.safe_load_all(stdin) if d)
        return documents


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def conf(tmp_path):
    return Settings(
        failure_requeue_seconds=300,
        steady_state_requeue_seconds=3600,
        error_requeue_seconds=60,
        helm_values_dir=str(tmp_path),
        enforce_depends_on=False,
    )


@pytest.fixture
def resource():
    """DependencyManager handle with cluster writes mocked out."""
    dm = DependencyManager("deps", "team-a", finalizers=[DependencyManager.FINALIZER])
    dm.patch_status = AsyncMock()
    dm.attach_finalizer = AsyncMock()
    dm.detach_finalizer = AsyncMock()
    return dm


def make_body(spec=None, finalizers=None, deleting=False, status=None, generation=1):
    """A DependencyManager object as kopf hands it to handlers."""
    metadata = {
        "name": "deps",
        "namespace": "team-a",
        "generation": generation,
        "finalizers": (
            [DependencyManager.FINALIZER] if finalizers is None else finalizers
        ),
    }
    if deleting:
        metadata["deletionTimestamp"] = "2024-01-01T00:00:00Z"
    body = {"metadata": metadata, "spec": spec or {}}
    if status is not None:
        body["status"] = status
    return body
