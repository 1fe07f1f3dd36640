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

"""Homebrew bootstrap and CLI tool installation."""

from __future__ import annotations

import os
import platform
from pathlib import Path

from homelab_manager import console, logger
from homelab_manager.constants import HOMEBREW_INSTALL_SCRIPT, HOMEBREW_PREFIXES
from homelab_manager.utils import check_result, command_available, run_command

HOMEBREW_INSTALL_TIMEOUT_SECONDS = 1800
BREW_INSTALL_TIMEOUT_SECONDS = 900


def homebrew_supported() -> bool:
    """Homebrew-managed installs are only attempted on macOS."""
    return platform.system() == "Darwin"


def find_homebrew() -> Path | None:
    """Return the brew executable from a known prefix, or None."""
    for prefix in HOMEBREW_PREFIXES:
        path = Path(prefix)
        if path.exists():
            return path
    return None


def homebrew_missing() -> bool:
    return homebrew_supported() and find_homebrew() is None


def install_homebrew() -> Path | None:
    """Run the official Homebrew installer non-interactively.

    Returns:
        Path of the installed brew executable.

    Raises:
        CommandFailed: If the installer fails.
    """
    console.print("[yellow]\u2139\ufe0f  Installing Homebrew...[/yellow]")
    result = run_command(
        ["/bin/bash", "-c", f'/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_SCRIPT})"'],
        timeout=HOMEBREW_INSTALL_TIMEOUT_SECONDS,
        env={**os.environ, "NONINTERACTIVE": "1"},
    )
    check_result(result, "Failed to install Homebrew")
    brew = find_homebrew()
    console.print(f"[green]\u2705 Homebrew installed at {brew}[/green]")
    return brew


def formula_installed(brew: Path, formula: str) -> bool:
    """Return True if *formula* is already installed by Homebrew."""
    result = run_command([str(brew), "list", "--versions", formula.rsplit("/", 1)[-1]])
    return result.ok and bool(result.stdout.strip())


def install_needed(command: str, formula: str) -> bool:
    """Decide whether *formula* has to be installed for *command*.

    Without Homebrew nothing can be installed: a missing tool is reported
    and left to fail in the step that needs it.
    """
    brew = find_homebrew() if homebrew_supported() else None
    if brew is None:
        if not command_available(command):
            console.print(f"[yellow]\u26a0\ufe0f  '{command}' not found on PATH; install it manually[/yellow]")
        return False
    if formula_installed(brew, formula):
        logger.debug("%s already installed", formula)
        return False
    return True


def install_formula(formula: str) -> None:
    """Install *formula* with Homebrew.

    Raises:
        CommandFailed: If Homebrew is missing or ``brew install`` fails.
    """
    brew = find_homebrew()
    console.print(f"[yellow]\u2139\ufe0f  Installing {formula} via Homebrew...[/yellow]")
    result = run_command([str(brew or "brew"), "install", formula], timeout=BREW_INSTALL_TIMEOUT_SECONDS)
    check_result(result, f"Failed to install {formula}")
    console.print(f"[green]\u2705 {formula} installed[/green]")
