# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Command execution helpers and tool availability checks."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass

import sh

from homelab_manager import logger
from homelab_manager.constants import COMMAND_NOT_FOUND_EXIT, DEFAULT_COMMAND_TIMEOUT_SECONDS
from homelab_manager.errors import CommandFailed


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command invocation.

    Attributes:
        command: Argument vector that was executed.
        returncode: Exit status; 127 when the binary could not be started.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def display(self) -> str:
        return shlex.join(self.command)


def run_command(
    args: list[str],
    timeout: int = DEFAULT_COMMAND_TIMEOUT_SECONDS,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Run a command via subprocess and capture its output.

    Launch failures (binary missing, permission denied, timeout) are folded
    into the result instead of raised, so callers can treat "tool missing"
    the same way as a failing tool.

    Args:
        args: Full argument vector (e.g. ``["k3d", "cluster", "list"]``).
        timeout: Maximum seconds to wait for the command to complete.
        env: Complete environment for the child, or None to inherit.

    Returns:
        The captured CommandResult.
    """
    logger.debug("$ %s", shlex.join(args))
    try:
        proc = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as exc:
        return CommandResult(tuple(args), COMMAND_NOT_FOUND_EXIT, "", str(exc))
    except (subprocess.SubprocessError, OSError) as exc:
        return CommandResult(tuple(args), 1, "", str(exc))
    result = CommandResult(tuple(args), proc.returncode, proc.stdout, proc.stderr)
    if not result.ok:
        logger.debug("exit status %d: %s", result.returncode, result.stderr.strip())
    return result


def check_result(result: CommandResult, summary: str) -> CommandResult:
    """Raise CommandFailed unless *result* succeeded.

    Args:
        result: Result of a previously executed command.
        summary: Human-readable description of what failed.

    Returns:
        The same result, for chaining.

    Raises:
        CommandFailed: If the command exited non-zero.
    """
    if not result.ok:
        raise CommandFailed(summary, result)
    return result


def command_available(cmd: str) -> bool:
    """Return True if *cmd* resolves on the system PATH."""
    try:
        return sh.which(cmd) is not None
    except (sh.ErrorReturnCode, sh.CommandNotFound):
        return False
