"""Chart generation for finished reports."""

import matplotlib.pyplot as plt
from datetime import datetime
from typing import Optional

from ..core.models import Report


def generate_report_chart(
    report: Report,
    output_path: Optional[str] = None,
    show: bool = False,
) -> Optional[str]:
    """
    Plot the per-second throughput and the outcome split of one report.

    Args:
        report: Finished report to plot
        output_path: Path to save the chart (auto-generated if None)
        show: Whether to display the chart

    Returns:
        Path to saved chart file, or None if there was nothing to plot
    """
    if report.total_requests == 0:
        print("No requests to chart.")
        return None

    elapsed = [s.elapsed_seconds for s in report.history]
    rps = [s.requests_per_second for s in report.history]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(15, 6), gridspec_kw={"width_ratios": [3, 1]})
    fig.suptitle(
        f"Load Test: {report.config.method.value} {report.config.url}",
        fontsize=14,
        fontweight="bold",
    )

    # Throughput timeline
    ax1.plot(elapsed, rps, "b-o", linewidth=2, markersize=4, label="Completed req/s")
    ax1.axhline(
        report.config.concurrency, color="gray", linestyle="--", alpha=0.6, label="Target req/s"
    )
    ax1.axhline(report.average_rps, color="green", linestyle=":", label="Average req/s")
    ax1.set_xlabel("Elapsed (s)")
    ax1.set_ylabel("Requests/second")
    ax1.set_title("Throughput")
    ax1.set_ylim(bottom=0)
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # Outcome split
    bars = ax2.bar(
        ["Success", "Failure"],
        [report.success_count, report.failure_count],
        color=["tab:green", "tab:red"],
    )
    for bar in bars:
        ax2.annotate(
            f"{int(bar.get_height())}",
            (bar.get_x() + bar.get_width() / 2, bar.get_height()),
            ha="center",
            va="bottom",
        )
    ax2.set_title(f"Outcomes ({report.success_rate:.1f}% success)")
    ax2.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()

    if output_path:
        saved_path = output_path
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        saved_path = f"load_test_{timestamp}.png"

    plt.savefig(saved_path, dpi=150, bbox_inches="tight")
    print(f"\nChart saved as: {saved_path}")

    if show:
        plt.show()
    plt.close(fig)

    return saved_path
