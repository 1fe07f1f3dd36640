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

"""Exception hierarchy for provisioning and decommissioning failures."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from homelab_manager.utils import CommandResult

_MAX_DETAIL_CHARS = 2000


class HomelabError(RuntimeError):
    """Base class for every fatal pipeline error."""


class ConfigurationError(HomelabError):
    """A required configuration value is missing or unusable."""


class CommandFailed(HomelabError):
    """An external command exited non-zero where success was required.

    The message carries a one-line summary followed by the tool's own
    diagnostic output.
    """

    def __init__(self, summary: str, result: CommandResult) -> None:
        self.summary = summary
        self.result = result
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        detail = (self.result.stderr or self.result.stdout).strip()
        if len(detail) > _MAX_DETAIL_CHARS:
            detail = f"{detail[:_MAX_DETAIL_CHARS - 3]}..."
        lines = [f"{self.summary} (exit status {self.result.returncode}: {self.result.display})"]
        if detail:
            lines.append(detail)
        return "\n".join(lines)


class PrerequisiteError(CommandFailed):
    """A prerequisite check reported that the host is not ready."""


class ReadinessTimeout(HomelabError):
    """A readiness probe never succeeded within its attempt budget."""

    def __init__(self, description: str, attempts: int, interval: float, hint: str = "") -> None:
        self.description = description
        self.attempts = attempts
        self.interval = interval
        message = f"{description} did not become ready after {attempts} attempts ({interval:g}s apart)"
        if hint:
            message = f"{message}\n{hint}"
        super().__init__(message)
