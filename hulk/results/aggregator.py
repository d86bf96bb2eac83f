"""Report aggregation and tabular export."""

import pandas as pd
from typing import List

from ..core.models import Report


class ReportAggregator:
    """Aggregates and formats finished reports for export."""

    def __init__(self):
        self.reports: List[Report] = []

    def add_report(self, report: Report) -> None:
        """Add a single report."""
        self.reports.append(report)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert reports to pandas DataFrame, one row per run."""
        data = []
        for report in self.reports:
            data.append({
                "Started": report.start_time.strftime("%Y-%m-%d %H:%M:%S"),
                "Method": report.config.method.value,
                "URL": report.config.url,
                "Concurrency": report.config.concurrency,
                "Duration_s": report.config.duration,
                "Total": report.total_requests,
                "Success": report.success_count,
                "Failed": report.failure_count,
                "Success%": f"{report.success_rate:.2f}",
                "Avg_RPS": f"{report.average_rps:.2f}",
                "Peak_RPS": max((s.requests_per_second for s in report.history), default=0),
                "Wall_s": f"{report.test_duration_seconds:.2f}",
                "Stop": report.stop_reason,
            })
        return pd.DataFrame(data)

    @staticmethod
    def history_dataframe(report: Report) -> pd.DataFrame:
        """Per-second throughput samples of one report."""
        return pd.DataFrame(
            [
                {"Elapsed_s": s.elapsed_seconds, "RPS": s.requests_per_second}
                for s in report.history
            ],
            columns=["Elapsed_s", "RPS"],
        )

    def to_csv(self, path: str) -> None:
        """Export to CSV file."""
        df = self.to_dataframe()
        df.to_csv(path, index=False)

    def to_tsv(self, path: str) -> None:
        """Export to TSV file."""
        df = self.to_dataframe()
        df.to_csv(path, sep="\t", index=False)

    def print_detailed_report(self, report: Report) -> None:
        """Print a single report in a formatted way."""
        print("\n" + "=" * 60)
        print("LOAD TEST RESULTS")
        print("=" * 60)
        print(f"Target:              {report.config.method.value} {report.config.url}")
        print(f"Concurrency:         {report.config.concurrency} requests/tick")
        print(f"Configured Duration: {report.config.duration}s")
        print(f"Stopped By:          {report.stop_reason}")
        print()
        print("REQUESTS")
        print("-" * 30)
        print(f"Total Requests:      {report.total_requests}")
        print(f"Successful Requests: {report.success_count}")
        print(f"Failed Requests:     {report.failure_count}")
        print(f"Success Rate:        {report.success_rate:.2f}%")
        print()
        print("THROUGHPUT")
        print("-" * 30)
        print(f"Average:             {report.average_rps:.2f} requests/second")
        print(f"Wall Clock Duration: {report.test_duration_seconds:.2f}s")

        if report.history:
            print()
            print("PER-SECOND SAMPLES")
            print("-" * 30)
            print(self.history_dataframe(report).to_string(index=False))
        print("=" * 60)
