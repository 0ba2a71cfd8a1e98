"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``CLOSUREDEPS_*`` prefix
  3. TOML file: ``closuredeps.toml`` discovered via walk-up
  4. Code defaults: baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the walk-up discovery from :mod:`closuredeps.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from closuredeps.config.discovery import find_config
from closuredeps.config.models import BundleConfig, ResolveConfig, ScanConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``closuredeps.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DepsSettings(BaseSettings):
    """Unified settings for the closuredeps CLI.

    Attributes:
        project_root: Directory the scan root is resolved against (parent of
            ``closuredeps.toml``, or CWD if no config found).
        config_path: The TOML file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CLOSUREDEPS_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    strict: bool = False

    # --- TOML sections ---
    scan: ScanConfig = Field(default_factory=ScanConfig)
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)
    bundle: BundleConfig = Field(default_factory=BundleConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @property
    def scan_root(self) -> Path:
        """Absolute directory that is scanned for source files."""
        return (self.project_root / self.scan.root).resolve()

    @property
    def strict_mode(self) -> bool:
        return self.strict or self.resolve.strict

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> DepsSettings:
        """Construct settings from a CLI invocation.

        Discovers ``closuredeps.toml`` via walk-up (or explicit
        *config_path*), resolves *project_root* from the config file's parent
        directory, and merges CLI flags as highest-priority overrides.

        Only flags that are set are forwarded: an unset flag (``False`` from
        Click) leaves ``CLOSUREDEPS_*`` env vars and TOML values in effect.
        """
        overrides = {name: value for name, value in cli_flags.items() if value}
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        finally:
            _tls.toml_path = None
