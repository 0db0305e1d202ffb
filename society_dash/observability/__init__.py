"""
Observability: structured logging and report-run ids.

Usage:
    from society_dash.observability import configure_logging, ReportContext

    configure_logging("INFO")
    with ReportContext(label="dues") as ctx:
        logger.info("Aging computed")   # JSON line carries ctx.report_id
"""

from .context import ReportContext, generate_report_id, get_report_id
from .logging import (
    HumanFormatter,
    JSONFormatter,
    configure_from_env,
    configure_logging,
    get_logger,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "configure_from_env",
    "JSONFormatter",
    "HumanFormatter",
    "ReportContext",
    "get_report_id",
    "generate_report_id",
]
