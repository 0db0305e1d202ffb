"""
Centralized configuration for society-dash.

Deployment settings come from environment variables; reporting policy
(income mapping, burn window, risk thresholds, budgets) comes from
config/reporting.yaml, falling back to the defaults below when the file is
missing or unreadable.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from society_dash import paths

logger = logging.getLogger(__name__)

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("SOCIETY_DASH_LOG_LEVEL", "INFO")
"""Root log level for configure_logging()."""

_log_json = os.environ.get("SOCIETY_DASH_LOG_JSON", "").lower()
LOG_JSON: bool | None = {"1": True, "true": True, "0": False, "false": False}.get(_log_json)
"""Force JSON (true) or human (false) log lines. Unset = auto-detect from TTY."""

LOG_FILE: str | None = os.environ.get("SOCIETY_DASH_LOG_FILE") or None
"""Optional rotating log file path."""

# ============================================================
# Reporting policy defaults
# ============================================================

DEFAULT_INCOME_CATEGORY_MAP: dict[str, str] = {
    "Maintenance": "Maintenance",
    "SinkingFund": "SinkingFund",
    "Amenity": "Clubhouse",
    "Parking": "Parking",
    "Penalty": "Penalties",
    "Interest": "Interest",
    "Other": "Miscellaneous",
}
"""Invoice type -> income category. Unmapped types fall to FALLBACK_INCOME_CATEGORY."""

FALLBACK_INCOME_CATEGORY = "Miscellaneous"

DEFAULT_BURN_RATE_WINDOW_MONTHS = 3
DEFAULT_DUES_RISK_THRESHOLDS = {"high": 50000.0, "medium": 20000.0}
DEFAULT_TREND_MONTHS = 12
DEFAULT_DASHBOARD_TREND_MONTHS = 3


@dataclass
class ReportingPolicy:
    """Tunable reporting rules. Aging bucket edges are fixed and not part of it."""

    income_category_map: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_INCOME_CATEGORY_MAP)
    )
    burn_rate_window_months: int = DEFAULT_BURN_RATE_WINDOW_MONTHS
    dues_risk_thresholds: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_DUES_RISK_THRESHOLDS)
    )
    default_trend_months: int = DEFAULT_TREND_MONTHS
    dashboard_trend_months: int = DEFAULT_DASHBOARD_TREND_MONTHS
    category_budgets: dict[str, float] = field(default_factory=dict)

    def income_category(self, invoice_type: str) -> str:
        return self.income_category_map.get(invoice_type, FALLBACK_INCOME_CATEGORY)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ReportingPolicy":
        policy = cls()
        income_map = raw.get("income_category_map")
        if isinstance(income_map, dict):
            policy.income_category_map.update({str(k): str(v) for k, v in income_map.items()})
        if raw.get("burn_rate_window_months") is not None:
            window = int(raw["burn_rate_window_months"])
            if window < 1:
                raise ValueError(f"burn_rate_window_months must be >= 1, got {window}")
            policy.burn_rate_window_months = window
        thresholds = raw.get("dues_risk_thresholds")
        if isinstance(thresholds, dict):
            policy.dues_risk_thresholds.update({k: float(v) for k, v in thresholds.items()})
        if raw.get("default_trend_months") is not None:
            policy.default_trend_months = int(raw["default_trend_months"])
        if raw.get("dashboard_trend_months") is not None:
            policy.dashboard_trend_months = int(raw["dashboard_trend_months"])
        budgets = raw.get("category_budgets")
        if isinstance(budgets, dict):
            policy.category_budgets = {str(k): float(v) for k, v in budgets.items()}
        return policy


def load_policy(config_path: Path | None = None) -> ReportingPolicy:
    """Load the reporting policy YAML, returning defaults on any failure."""
    if config_path is None:
        config_path = paths.reporting_config_path()

    if not config_path.exists():
        logger.warning("Reporting config not found at %s, using defaults", config_path)
        return ReportingPolicy()
    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError("top-level YAML value must be a mapping")
        return ReportingPolicy.from_dict(raw)
    except (yaml.YAMLError, ValueError, TypeError, OSError) as exc:
        logger.error("Failed to load reporting config %s: %s", config_path, exc)
        return ReportingPolicy()
