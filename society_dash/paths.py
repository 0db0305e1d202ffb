from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "SOCIETY_DASH_HOME"
APP_ENV_CONFIG = "SOCIETY_DASH_CONFIG"


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains society_dash/, config/, tests/.
    """
    return Path(__file__).parent.parent.resolve()


def app_home() -> Path:
    """
    User-writable home for society-dash (log files).
    Override with SOCIETY_DASH_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".society_dash").resolve()


def log_dir() -> Path:
    d = app_home() / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def reporting_config_path() -> Path:
    """
    Reporting policy YAML.

    Resolution order:
    1. SOCIETY_DASH_CONFIG env var (explicit override)
    2. <project root>/config/reporting.yaml (default)
    """
    if os.environ.get(APP_ENV_CONFIG):
        return Path(os.environ[APP_ENV_CONFIG]).expanduser().resolve()
    return project_root() / "config" / "reporting.yaml"
