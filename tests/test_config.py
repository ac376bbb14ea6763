import textwrap

import pytest

from rss_viewer.config import (
    BACKEND_URL_ENV,
    DEFAULT_BACKEND_URL,
    AppConfig,
    parse_app_config,
    parse_env_config,
    resolve_backend_url,
)


def test_parse_env_config(tmp_path):
    env_file = tmp_path / "env.xml"
    env_file.write_text(
        textwrap.dedent("""
            <environment>
                <variable name="TEST_VAR">test_value</variable>
                <variable name="ANOTHER_VAR">12345</variable>
            </environment>
        """),
        encoding="utf-8",
    )

    env_vars = parse_env_config(str(env_file))
    assert env_vars["TEST_VAR"] == "test_value"
    assert env_vars["ANOTHER_VAR"] == "12345"


def test_parse_app_config(tmp_path):
    config_file = tmp_path / "config.xml"
    env_file = tmp_path / "env.xml"
    log_file = tmp_path / "logs" / "viewer.log"
    env_file.touch()

    config_file.write_text(
        textwrap.dedent("""
            <config>
                <backend-url>http://feeds.internal:8080</backend-url>
                <timeout>30</timeout>
                <user-agent>rssss</user-agent>
                <env>env.xml</env>
                <logging>
                    <level>DEBUG</level>
                    <file>logs/viewer.log</file>
                </logging>
            </config>
        """),
        encoding="utf-8",
    )

    config = parse_app_config(str(config_file))

    assert isinstance(config, AppConfig)
    assert config.backend_url == "http://feeds.internal:8080"
    assert config.timeout == 30.0
    assert config.user_agent == "rssss"
    assert config.env_file == str(env_file.resolve())
    assert config.logging.level == "DEBUG"
    assert config.logging.file == str(log_file.resolve())


def test_parse_app_config_minimal(tmp_path):
    config_file = tmp_path / "minimal.xml"
    config_file.write_text("<config />", encoding="utf-8")

    config = parse_app_config(str(config_file))

    assert config.backend_url is None
    assert config.timeout is None
    assert config.env_file is None
    assert config.logging.level == "INFO"


def test_parse_app_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_app_config(str(tmp_path / "nope.xml"))


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_parse_app_config_rejects_bad_timeout(tmp_path, value):
    config_file = tmp_path / "config.xml"
    config_file.write_text(f"<config><timeout>{value}</timeout></config>", encoding="utf-8")

    with pytest.raises(ValueError):
        parse_app_config(str(config_file))


def test_resolve_backend_url_precedence(monkeypatch):
    config = AppConfig(backend_url="http://from-config")
    monkeypatch.delenv(BACKEND_URL_ENV, raising=False)

    assert resolve_backend_url(None, AppConfig()) == DEFAULT_BACKEND_URL
    assert resolve_backend_url(None, config) == "http://from-config"

    monkeypatch.setenv(BACKEND_URL_ENV, "https://from-env")
    assert resolve_backend_url(None, config) == "https://from-env"
    assert resolve_backend_url("http://from-cli", config) == "http://from-cli"


def test_resolve_backend_url_rejects_non_http(monkeypatch):
    monkeypatch.delenv(BACKEND_URL_ENV, raising=False)

    with pytest.raises(ValueError):
        resolve_backend_url("ftp://backend", AppConfig())
    with pytest.raises(ValueError):
        resolve_backend_url("backend:8080", AppConfig())
