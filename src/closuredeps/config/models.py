"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, closuredeps.toml only contains
overrides. A project with plain ``*.js`` sources needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScanConfig(BaseModel):
    """[scan] section: which files feed the dependency graph."""

    model_config = {"frozen": True}

    root: str = "."
    source_suffix: str = ".js"
    compiled_suffix: str = ".min.js"
    skip_dirs: list[str] = Field(default_factory=lambda: [".git", "node_modules"])


class ResolveConfig(BaseModel):
    """[resolve] section."""

    model_config = {"frozen": True}

    # Fail resolution when the scan rejected any edge.
    strict: bool = False
    dedupe_paths: bool = True


class BundleConfig(BaseModel):
    """[bundle] section."""

    model_config = {"frozen": True}

    separator: str = "\n"

