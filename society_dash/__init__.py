"""
society-dash - finance reporting core for a residential society dashboard.

    from society_dash import ReportingService, load_ledger_file

    store = load_ledger_file("ledger.json")
    service = ReportingService(store)
    service.get_kpi_metrics("2024-06")
"""

from society_dash.ledger import LedgerStore, load_ledger, load_ledger_file
from society_dash.reporting import ReportingService

__version__ = "0.1.0"

__all__ = ["LedgerStore", "ReportingService", "load_ledger", "load_ledger_file", "__version__"]
