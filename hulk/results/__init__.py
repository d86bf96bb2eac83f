"""Export and charting of finished reports."""

from .aggregator import ReportAggregator
from .charts import generate_report_chart

__all__ = ["ReportAggregator", "generate_report_chart"]
