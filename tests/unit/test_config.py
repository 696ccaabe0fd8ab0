"""
Unit tests for client settings loading.
"""

from pathlib import Path

import pytest

from linkshelf.app_shell.config import CONFIG_ENV_VAR, ClientSettings, load_settings


def test_defaults():
    settings = ClientSettings()

    assert settings.api_base_url == "https://app.link2letter.com"
    assert settings.page_size == 5
    assert settings.fetch_page_size == 500
    assert settings.log_level == "INFO"


def test_load_valid_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "api_base_url: https://links.example.com/\n"
        "page_size: 10\n"
        "log_level: debug\n"
    )

    settings = load_settings(path)

    assert settings.api_base_url == "https://links.example.com"
    assert settings.page_size == 10
    assert settings.log_level == "DEBUG"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_settings(path) == ClientSettings()


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml")


def test_missing_default_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.yaml"))

    assert load_settings() == ClientSettings()


def test_env_var_points_at_config(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("page_size: 3\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert load_settings().page_size == 3


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("page_size: [unclosed\n")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_settings(path)


def test_not_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ValueError, match="mapping"):
        load_settings(path)


@pytest.mark.parametrize(
    "content",
    [
        "page_size: 0\n",
        "api_base_url: ftp://example.com\n",
        "log_level: LOUD\n",
        "unknown_key: 1\n",
    ],
)
def test_schema_violations(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)

    with pytest.raises(ValueError, match="Config validation failed"):
        load_settings(path)


def test_data_dir_is_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(f"data_dir: {tmp_path / 'data'}\n")

    assert load_settings(path).data_dir == Path(tmp_path / "data")
