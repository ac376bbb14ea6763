"""Configuration loading for the viewer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse
from xml.etree import ElementTree as ET

logger = logging.getLogger(__name__)

BACKEND_URL_ENV = "RSS_VIEWER_BACKEND_URL"
DEFAULT_BACKEND_URL = "http://127.0.0.1:8080"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    backend_url: Optional[str] = None
    timeout: Optional[float] = None
    user_agent: Optional[str] = None
    env_file: Optional[str] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def parse_env_config(path: str) -> Dict[str, str]:
    """Parse environment variables from XML."""
    env_vars = {}
    if not path:
        return env_vars

    logger.info("Loading environment configuration from %s", path)
    try:
        tree = ET.parse(path)
        root = tree.getroot()
        for var in root.findall("variable"):
            name = var.attrib.get("name")
            value = var.text
            if name and value:
                env_vars[name] = value.strip()
    except Exception as exc:
        logger.warning("Failed to load environment config: %s", exc)
        raise

    return env_vars


def parse_app_config(path: str) -> AppConfig:
    """Parse the application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    backend_url = (root.findtext("backend-url") or "").strip() or None

    timeout_text = (root.findtext("timeout") or "").strip()
    timeout = None
    if timeout_text:
        try:
            timeout = float(timeout_text)
        except ValueError:
            raise ValueError(f"Invalid <timeout> value: {timeout_text!r}")
        if timeout <= 0:
            raise ValueError("<timeout> must be positive.")

    user_agent = (root.findtext("user-agent") or "").strip() or None

    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        backend_url=backend_url,
        timeout=timeout,
        user_agent=user_agent,
        env_file=env_file,
        logging=logging_config,
    )


def resolve_backend_url(cli_value: Optional[str], app_config: AppConfig) -> str:
    """Pick the backend URL from the CLI, the environment, then the config file."""
    url = (
        cli_value
        or os.environ.get(BACKEND_URL_ENV)
        or app_config.backend_url
        or DEFAULT_BACKEND_URL
    )
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Backend URL must be an http(s) URL: {url!r}")
    return url
