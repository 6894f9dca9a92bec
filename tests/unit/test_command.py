"""Unit tests for tool invocation."""

import asyncio
import sys
import pytest
from unittest.mock import Mock
from zerg.utils.command import CommandResult, SubprocessToolRunner
from zerg.utils.errors import CommandError


class TestCommandResult:
    """Tests for CommandResult."""

    def test_ok(self):
        result = CommandResult(cmd=["helm", "version"], returncode=0)
        assert result.ok
        assert result.check("ignored") is result

    def test_check_raises_with_stderr(self):
        result = CommandResult(
            cmd=["helm", "install"], returncode=1, stderr="Error: chart not found\n"
        )
        with pytest.raises(CommandError, match="^Helm install failed: Error: chart not found$"):
            result.check("Helm install failed")

    def test_check_without_stderr(self):
        result = CommandResult(cmd=["kubectl", "apply"], returncode=2)
        with pytest.raises(CommandError, match="kubectl apply failed: exit code 2"):
            result.check()

    def test_already_exists(self):
        result = CommandResult(
            cmd=["kubectl", "create", "namespace", "argo"],
            returncode=1,
            stderr='Error from server (AlreadyExists): namespaces "argo" already exists',
        )
        assert result.already_exists
        assert result.check("create", tolerate_already_exists=True) is result
        with pytest.raises(CommandError):
            result.check("create")

    def test_string_quotes_arguments(self):
        result = CommandResult(cmd=["sh", "-c", "echo hi"], returncode=0)
        assert result.string == "sh -c 'echo hi'"


class TestToolRunner:
    """Tests for the ToolRunner helpers."""

    def test_apply_pipes_document(self, runner):
        asyncio.run(runner.apply("kind: ConfigMap\n", namespace="team-a"))
        (cmd, stdin), = runner.calls
        assert cmd == ["kubectl", "apply", "-f", "-", "--namespace", "team-a"]
        assert stdin == "kind: ConfigMap\n"

    def test_ensure_namespace_creates(self, runner):
        assert asyncio.run(runner.ensure_namespace("argocd")) is True
        assert runner.commands == [
            "kubectl get namespace argocd",
            "kubectl create namespace argocd",
        ]

    def test_ensure_namespace_existing(self, runner):
        runner.namespaces.add("argocd")
        assert asyncio.run(runner.ensure_namespace("argocd")) is False
        assert runner.commands == ["kubectl get namespace argocd"]

    def test_ensure_namespace_failure(self, runner):
        runner.fail_on("create namespace", stderr="forbidden")
        with pytest.raises(CommandError, match="Failed to create argocd namespace"):
            asyncio.run(runner.ensure_namespace("argocd"))


class TestSubprocessToolRunner:
    """Tests for SubprocessToolRunner."""

    def test_runs_process(self):
        runner = SubprocessToolRunner(timeout=30)
        result = asyncio.run(
            runner.run(sys.executable, ["-c", "import sys; print(sys.stdin.read())"], stdin="hello")
        )
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_nonzero_exit(self):
        runner = SubprocessToolRunner(timeout=30)
        result = asyncio.run(
            runner.run(sys.executable, ["-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
        )
        assert result.returncode == 3
        assert result.stderr == "bad"

    def test_missing_binary(self):
        sensor = Mock()
        runner = SubprocessToolRunner(timeout=30, sensor=sensor)
        with pytest.raises(CommandError, match="Failed to execute"):
            asyncio.run(runner.run("zerg-no-such-binary", ["--version"]))
        sensor.on_command_start.assert_called_once_with("zerg-no-such-binary")
        args = sensor.on_command_complete.call_args.args
        assert args[2] is False
        assert isinstance(args[3], CommandError)

    def test_timeout(self):
        runner = SubprocessToolRunner(timeout=0.1)
        with pytest.raises(CommandError, match="timed out"):
            asyncio.run(runner.run(sys.executable, ["-c", "import time; time.sleep(5)"]))
