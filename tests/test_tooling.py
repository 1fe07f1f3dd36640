"""Tests for Homebrew detection and tool installs."""

from __future__ import annotations

import pytest

from homelab_manager import tooling
from homelab_manager.errors import CommandFailed
from homelab_manager.utils import CommandResult


@pytest.fixture
def brew(tmp_path, monkeypatch):
    path = tmp_path / "bin" / "brew"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\n")
    monkeypatch.setattr(tooling, "HOMEBREW_PREFIXES", (str(tmp_path / "missing"), str(path)))
    monkeypatch.setattr(tooling, "homebrew_supported", lambda: True)
    return path


def _brew_runner(monkeypatch, installed: set[str], fail_install: bool = False) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(args, timeout=60, env=None):
        calls.append(list(args))
        if args[1:3] == ["list", "--versions"]:
            name = args[3]
            return CommandResult(tuple(args), 0 if name in installed else 1, f"{name} 1.0\n" if name in installed else "")
        if args[1] == "install":
            return CommandResult(tuple(args), 1 if fail_install else 0, "", "Error: no bottle")
        return CommandResult(tuple(args), 127)

    monkeypatch.setattr(tooling, "run_command", fake_run)
    return calls


def test_find_homebrew_uses_first_existing_prefix(brew):
    assert tooling.find_homebrew() == brew


def test_homebrew_missing_only_on_macos(monkeypatch):
    monkeypatch.setattr(tooling, "HOMEBREW_PREFIXES", ("/nonexistent/brew",))
    monkeypatch.setattr(tooling, "homebrew_supported", lambda: False)
    assert tooling.homebrew_missing() is False
    monkeypatch.setattr(tooling, "homebrew_supported", lambda: True)
    assert tooling.homebrew_missing() is True


def test_install_needed_checks_formula_short_name(brew, monkeypatch):
    calls = _brew_runner(monkeypatch, installed={"flux"})
    assert tooling.install_needed("flux", "fluxcd/tap/flux") is False
    assert calls == [[str(brew), "list", "--versions", "flux"]]
    assert tooling.install_needed("k3d", "k3d") is True


def test_install_formula_runs_brew_install(brew, monkeypatch):
    calls = _brew_runner(monkeypatch, installed=set())
    tooling.install_formula("k3d")
    assert calls == [[str(brew), "install", "k3d"]]


def test_install_formula_failure_raises(brew, monkeypatch):
    _brew_runner(monkeypatch, installed=set(), fail_install=True)
    with pytest.raises(CommandFailed, match="Failed to install k3d"):
        tooling.install_formula("k3d")


def test_without_homebrew_nothing_is_installed(monkeypatch):
    monkeypatch.setattr(tooling, "homebrew_supported", lambda: False)
    monkeypatch.setattr(tooling, "command_available", lambda cmd: False)
    monkeypatch.setattr(tooling, "run_command", lambda *a, **k: pytest.fail("ran a command"))
    assert tooling.install_needed("k3d", "k3d") is False
