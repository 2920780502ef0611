"""Configuration management for typesort.

Settings live in ``~/.typesort/config.yaml``. Custom presets are YAML files in
``~/.typesort/presets`` holding a ``description`` and a ``config`` mapping.
"""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Mapping

import yaml

from .exceptions import ConfigError
from .models import TypesortConfig
from .presets import BUILTIN_PRESETS, Preset
from .resolver import (
    ENV_PREFIX,
    collect_env_overrides,
    flatten_for_env,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.typesort/config.yaml")
PRESETS_DIRNAME = "presets"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # typesort configuration file
    # Edit by hand or use `typesort config set KEY --value VALUE`.
    # Environment variables named TYPESORT__SECTION__KEY override values stored here.
    """
)


class ConfigManager:
    """Read, write, and resolve the typesort configuration file.

    Args:
        config_path: Location of the YAML file; defaults to ``~/.typesort/config.yaml``.
        env: Environment consulted for ``TYPESORT__`` overrides; defaults to ``os.environ``.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    @property
    def presets_dir(self) -> Path:
        """Return the directory scanned for custom presets."""
        return self._config_path.parent / PRESETS_DIRNAME

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
        preset: str | None = None,
    ) -> TypesortConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``TYPESORT__`` environment variables are honored.
            ensure_file: Create the configuration file with defaults when missing.
            env_overrides: Explicit environment mapping used instead of ``os.environ``.
            preset: Name of a built-in or custom preset layered above the file.

        Returns:
            TypesortConfig: Validated configuration.

        Raises:
            ConfigError: If the file, the preset, or any override is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_data: Mapping[str, Any] | None = None
        if include_env:
            source = env_overrides if env_overrides is not None else self._env
            env_data = collect_env_overrides(source)

        return resolve_with_precedence(
            defaults=TypesortConfig(),
            file_overrides=self._read_file(),
            preset_overrides=self.load_preset(preset).overrides if preset else None,
            env_overrides=env_data,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk."""
        return self._read_file()

    def save(self, config: TypesortConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk, replacing the current file."""
        if isinstance(config, TypesortConfig):
            self._write_file(config.model_dump(mode="python"))
        else:
            self._write_file(dict(config))

    def ensure_exists(self) -> Path:
        """Create the configuration file with default values when it is missing."""
        if not self._config_path.exists():
            self.reset()
        return self._config_path

    def reset(self) -> None:
        """Overwrite the configuration file with default values."""
        self._write_file(TypesortConfig().model_dump(mode="python"))

    def read_text(self) -> str:
        """Return the configuration file contents, or an empty string."""
        try:
            return self._config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    # Presets ----------------------------------------------------------

    def list_presets(self) -> List[Preset]:
        """Return built-in presets followed by valid custom presets, by name."""
        presets = list(BUILTIN_PRESETS.values())
        if self.presets_dir.is_dir():
            for path in sorted(self.presets_dir.glob("*.yaml")):
                if path.stem in BUILTIN_PRESETS:
                    continue
                try:
                    presets.append(self._read_preset(path))
                except ConfigError:
                    continue
        return presets

    def load_preset(self, name: str) -> Preset:
        """Return the preset called ``name``.

        Raises:
            ConfigError: If no such preset exists or its file is invalid.
        """
        if name in BUILTIN_PRESETS:
            return BUILTIN_PRESETS[name]
        path = self.presets_dir / f"{name}.yaml"
        if not path.exists():
            known = ", ".join(preset.name for preset in self.list_presets())
            raise ConfigError(f"Unknown preset {name!r}. Available presets: {known}.")
        return self._read_preset(path)

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        data = self._read_yaml(self._config_path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return data

    def _read_preset(self, path: Path) -> Preset:
        data = self._read_yaml(path)
        if not isinstance(data, dict) or not isinstance(data.get("config", {}), dict):
            raise ConfigError(f"Preset file {path} must hold a mapping with a 'config' mapping.")
        return Preset(
            name=path.stem,
            description=str(data.get("description") or "Custom preset"),
            overrides=data.get("config") or {},
            builtin=False,
        )

    @staticmethod
    def _read_yaml(path: Path) -> Any:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )


__all__ = [
    "BUILTIN_PRESETS",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "Preset",
    "TypesortConfig",
    "flatten_for_env",
    "resolve_with_precedence",
]
