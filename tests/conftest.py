"""Shared pytest fixtures and test helpers for closuredeps tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from closuredeps.config.settings import DepsSettings
from closuredeps.infrastructure.workspace import Workspace


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of settings resolution."""
    for name in ("CONFIG", "STRICT", "JSON_OUTPUT", "QUIET", "VERBOSE", "LOG_JSON"):
        monkeypatch.delenv(f"CLOSUREDEPS_{name}", raising=False)


@pytest.fixture(autouse=True)
def _restore_root_handlers() -> Iterator[None]:
    """CLI runs reconfigure logging onto CliRunner's stderr; undo that per test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    yield
    root.handlers = handlers


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """A small goog.provide/goog.require tree.

    app.main -> app.ui, app.util
    app.ui   -> app.util, app.dom
    app.util, app.dom: leaves
    """
    write_js(tmp_path, "src/main.js", provides=["app.main"], requires=["app.ui", "app.util"])
    write_js(tmp_path, "src/ui.js", provides=["app.ui"], requires=["app.util", "app.dom"])
    write_js(tmp_path, "src/util.js", provides=["app.util"])
    write_js(tmp_path, "src/dom.js", provides=["app.dom"])
    return tmp_path


@pytest.fixture
def workspace(source_root: Path) -> Iterator[Workspace]:
    """Workspace over :func:`source_root`."""
    yield make_workspace(source_root)


@pytest.fixture
def _isolated_root(source_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the sample source tree so the CLI scans it."""
    monkeypatch.chdir(source_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_js(
    root: Path,
    relative: str,
    *,
    provides: list[str] | None = None,
    requires: list[str] | None = None,
    body: str = "",
) -> Path:
    """Write a source file with the given declarations."""
    lines = [f"goog.provide('{name}');" for name in provides or []]
    lines += [f"goog.require('{name}');" for name in requires or []]
    lines.append(body or f"// {relative}")
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def make_workspace(root: Path, **flags: object) -> Workspace:
    """Workspace rooted at *root* with optional settings overrides."""
    settings = DepsSettings.from_cli(project_root=root, **flags)
    return Workspace(settings)
