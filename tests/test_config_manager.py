"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from typesort.config import (
    ConfigError,
    ConfigManager,
    TypesortConfig,
    flatten_for_env,
    resolve_with_precedence,
)
from typesort.config.resolver import assign_dotted


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".typesort" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "typesort configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, TypesortConfig)
    assert config.organization.mode == "category_table"
    assert config.archives.max_depth == 5
    assert config.performance.max_concurrent_files == 10


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"archives": {"max_depth": 2}, "performance": {"max_concurrent_files": 4}})

    env = {
        "TYPESORT__PERFORMANCE__MAX_CONCURRENT_FILES": "6",
        "TYPESORT__ORGANIZATION__MODE": "allow_list",
    }
    cli = {"performance.max_concurrent_files": 8}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.archives.max_depth == 2
    assert config.organization.mode == "allow_list"
    # CLI overrides take precedence over environment
    assert config.performance.max_concurrent_files == 8


def test_env_lists_are_parsed_as_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load(
        env_overrides={"TYPESORT__ORGANIZATION__ALLOWED_EXTENSIONS": "[.PNG, jpg, png]"}
    )

    assert config.organization.allowed_extensions == ["png", "jpg"]


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(TypesortConfig())

    assert flat["TYPESORT__ORGANIZATION__MODE"] == "category_table"
    assert flat["TYPESORT__ARCHIVES__MAX_ENTRIES"] == "10000"
    assert flat["TYPESORT__LOGGING__FILE"] == "null"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=TypesortConfig(),
            file_overrides={"performance": {"max_concurrent_files": 0}},
        )

    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=TypesortConfig(),
            file_overrides={"organization": {"unknown_option": True}},
        )


def test_assign_dotted_rejects_scalar_parents() -> None:
    data = {"archives": 3}

    with pytest.raises(ConfigError):
        assign_dotted(data, ["archives", "max_depth"], 1)


def test_builtin_preset_sits_between_file_and_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"archives": {"extract": True}, "filters": {"min_file_size": 5}})

    config = manager.load(preset="media", env_overrides={})
    overridden = manager.load(
        preset="media", env_overrides={"TYPESORT__ARCHIVES__EXTRACT": "true"}
    )

    assert config.archives.extract is False
    assert "mp4" in config.filters.include_extensions
    assert config.filters.min_file_size == 5
    assert overridden.archives.extract is True


def test_custom_presets_are_listed_and_loaded(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.presets_dir.mkdir(parents=True)
    (manager.presets_dir / "studio.yaml").write_text(
        "description: Studio assets\nconfig:\n  organization.mode: allow_list\n"
        "  performance:\n    max_concurrent_files: 3\n",
        encoding="utf-8",
    )
    (manager.presets_dir / "broken.yaml").write_text("- nope", encoding="utf-8")

    names = [preset.name for preset in manager.list_presets()]
    config = manager.load(preset="studio", include_env=False)

    assert "studio" in names
    assert "broken" not in names
    assert names[0] == "default"
    assert config.organization.mode == "allow_list"
    assert config.performance.max_concurrent_files == 3


def test_unknown_preset_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    with pytest.raises(ConfigError, match="Unknown preset 'nope'"):
        manager.load(preset="nope")


def test_reset_restores_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"archives": {"max_depth": 1}})

    manager.reset()

    assert manager.load(include_env=False).archives.max_depth == 5
