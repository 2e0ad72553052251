"""Report aggregation package."""

from library_ledger.queries.reports import ReportBuilder, first_max

__all__ = ["ReportBuilder", "first_max"]
