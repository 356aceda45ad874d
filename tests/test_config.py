from __future__ import annotations

import pytest

from mcprelay.config import (
    DEFAULT_LOGS_ENABLED,
    DEFAULT_LOGS_FORMAT,
    DEFAULT_LOGS_MAX_FILE_BYTES,
    DEFAULT_LOGS_MAX_FILES,
    DEFAULT_LOGS_REDACTION,
    ProjectConfigError,
    initialize_project_config,
    load_project_config,
    load_settings,
    project_config_exists,
)


def test_init_config_contains_client_and_logs_defaults(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    config_text = (config_root / "config.toml").read_text(encoding="utf-8")

    assert project_config_exists(tmp_path) is True
    assert (config_root / "mcp" / "servers.toml").is_file()
    assert (config_root / "logs").is_dir()
    assert "[client]" in config_text
    assert "[runtime.logs]" in config_text
    assert "max_file_bytes = 10485760" in config_text

    config = load_project_config(workspace_dir=tmp_path)
    assert config.originator == ""
    assert config.logs_enabled is DEFAULT_LOGS_ENABLED
    assert config.logs_format == DEFAULT_LOGS_FORMAT
    assert config.logs_max_file_bytes == DEFAULT_LOGS_MAX_FILE_BYTES
    assert config.logs_max_files == DEFAULT_LOGS_MAX_FILES
    assert config.logs_redaction == DEFAULT_LOGS_REDACTION


def test_init_refuses_existing_directory_unless_forced(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "stale.txt").write_text("x", encoding="utf-8")

    with pytest.raises(ProjectConfigError):
        initialize_project_config(workspace_dir=tmp_path)

    initialize_project_config(workspace_dir=tmp_path, force=True)
    assert not (config_root / "stale.txt").exists()


def test_load_settings_reads_overrides_and_falls_back_on_bad_values(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "config.toml").write_text(
        """
[client]
originator = "planner_bridge"

[runtime.logs]
enabled = "off"
format = "xml"
max_file_bytes = -5
max_files = 3
redaction = "STRICT"
""".strip(),
        encoding="utf-8",
    )

    settings = load_settings(workspace_dir=tmp_path)

    assert settings.originator == "planner_bridge"
    assert settings.logs_enabled is False
    assert settings.logs_format == DEFAULT_LOGS_FORMAT
    assert settings.logs_max_file_bytes == DEFAULT_LOGS_MAX_FILE_BYTES
    assert settings.logs_max_files == 3
    assert settings.logs_redaction == "strict"
    assert settings.mcp_servers_file == config_root.resolve() / "mcp" / "servers.toml"
    assert settings.logs_dir == config_root.resolve() / "logs"


def test_missing_or_invalid_config_raises(tmp_path):
    with pytest.raises(ProjectConfigError):
        load_settings(workspace_dir=tmp_path)

    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "config.toml").write_text("[client\n", encoding="utf-8")
    with pytest.raises(ProjectConfigError):
        load_project_config(workspace_dir=tmp_path)
