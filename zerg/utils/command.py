"""Running external provisioning tools (helm, kubectl, flux) from the operator.

The reconcile core never shells out directly: it is handed a `ToolRunner`,
so tests can substitute a recording fake for the real subprocess runner.
"""

import asyncio
import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from zerg.utils.errors import CommandError

logger = logging.getLogger(__name__)

KUBECTL = "kubectl"
HELM = "helm"
FLUX = "flux"

_ALREADY_EXISTS = "already exists"


@dataclass
class CommandResult:
    """Outcome of one tool invocation."""

    cmd: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def already_exists(self) -> bool:
        return _ALREADY_EXISTS in self.stderr.lower()

    @property
    def string(self) -> str:
        return " ".join(shlex.quote(arg) for arg in self.cmd)

    def check(
        self, message: Optional[str] = None, tolerate_already_exists: bool = False
    ) -> "CommandResult":
        """Raise CommandError unless the invocation succeeded.

        With `tolerate_already_exists`, an "already exists" failure counts as
        success.
        """
        if self.ok or (tolerate_already_exists and self.already_exists):
            return self
        detail = self.stderr.strip() or f"exit code {self.returncode}"
        raise CommandError(f"{message or self.string + ' failed'}: {detail}")


class ToolRunner(ABC):
    """Capability to run external binaries and apply documents to the cluster."""

    @abstractmethod
    async def run(
        self, binary: str, args: List[str], stdin: Optional[str] = None
    ) -> CommandResult:
        """Run `binary` with `args`, feeding `stdin` when given."""

    async def apply(
        self, document: str, namespace: Optional[str] = None
    ) -> CommandResult:
        """Create-or-update the resources of a YAML document."""
        args = ["apply", "-f", "-"]
        if namespace:
            args += ["--namespace", namespace]
        return await self.run(KUBECTL, args, stdin=document)

    async def namespace_exists(self, name: str) -> bool:
        result = await self.run(KUBECTL, ["get", "namespace", name])
        return result.ok

    async def ensure_namespace(self, name: str) -> bool:
        """Create namespace `name` unless present. Returns True when created."""
        if await self.namespace_exists(name):
            return False
        result = await self.run(KUBECTL, ["create", "namespace", name])
        result.check(
            f"Failed to create {name} namespace", tolerate_already_exists=True
        )
        return result.ok


@dataclass
class SubprocessToolRunner(ToolRunner):
    """Runs tools as local subprocesses."""

    timeout: float = 600.0
    """Seconds before an invocation is killed and reported as failed."""

    env: Optional[dict] = field(default=None)
    """Environment for the subprocess, inherited when None."""

    sensor: Optional[object] = None

    async def run(
        self, binary: str, args: List[str], stdin: Optional[str] = None
    ) -> CommandResult:
        cmd = [binary, *args]
        logger.debug(f"Running command: {' '.join(shlex.quote(a) for a in cmd)}")
        state = self.sensor.on_command_start(binary) if self.sensor else None
        try:
            result = await self._run(cmd, stdin)
        except CommandError as e:
            if self.sensor:
                self.sensor.on_command_complete(binary, state, False, e)
            raise
        if self.sensor:
            self.sensor.on_command_complete(binary, state, result.ok)
        if not result.ok:
            logger.debug(
                f"Command '{result.string}' failed with return code "
                f"{result.returncode}: {result.stderr.strip()}"
            )
        return result

    async def _run(self, cmd: List[str], stdin: Optional[str]) -> CommandResult:
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self.env,
            )
        except OSError as e:
            raise CommandError(f"Failed to execute {cmd[0]}: {e}") from e
        try:
            out, err = await asyncio.wait_for(
                proc.communicate(stdin.encode("utf-8") if stdin is not None else None),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise CommandError(
                f"Command '{cmd[0]}' timed out after {self.timeout} seconds"
            ) from e
        return CommandResult(
            cmd=cmd,
            returncode=proc.returncode,
            stdout=out.decode("utf-8", errors="replace"),
            stderr=err.decode("utf-8", errors="replace"),
        )
