"""
Report-run context: ties every log line of one dashboard request together.
"""

import contextvars
import uuid
from typing import Optional

_report_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "report_id", default=None
)


def get_report_id() -> Optional[str]:
    """Get the current report id from context."""
    return _report_id_var.get()


def generate_report_id() -> str:
    return f"rpt-{uuid.uuid4().hex[:16]}"


class ReportContext:
    """
    Scope one reporting request.

    Usage:
        with ReportContext(label="dashboard:2024-06") as ctx:
            logger.info("Building snapshot")   # carries ctx.report_id

    Nested contexts reuse the outer id unless one is passed explicitly.
    """

    def __init__(self, report_id: Optional[str] = None, label: Optional[str] = None):
        self.report_id = report_id or get_report_id() or generate_report_id()
        self.label = label
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "ReportContext":
        self._token = _report_id_var.set(self.report_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _report_id_var.reset(self._token)
            self._token = None
