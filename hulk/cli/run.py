"""CLI for running a single load test in the foreground."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import aiofiles

from ..core.controller import TestController
from ..core.errors import ConfigError
from ..core.models import HttpMethod, Report, TestConfig
from ..results.aggregator import ReportAggregator
from ..results.charts import generate_report_chart

logger = logging.getLogger(__name__)


async def read_body_file(path: str) -> str:
    """Read a request body from disk."""
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


async def run_load_test(
    config: TestConfig,
    controller: Optional[TestController] = None,
    progress_interval: float = 1.0,
) -> Optional[Report]:
    """
    Run one load test to completion, logging live progress.

    Args:
        config: Test configuration
        controller: Controller to run on (a fresh one if None)
        progress_interval: Seconds between progress lines

    Returns:
        The finalized Report, or None if no request completed
    """
    controller = controller or TestController()
    await controller.start(config)

    finished = asyncio.create_task(controller.wait_finished())
    try:
        while not finished.done():
            await asyncio.wait({finished}, timeout=progress_interval)
            status = controller.poll_status()
            if status.is_running:
                logger.info(
                    f"Requests Sent: {status.stats.total_requests}, "
                    f"Errors: {status.stats.failure_count} "
                    f"({status.elapsed_seconds:.1f}s elapsed)"
                )
        report = finished.result()
    finally:
        # Covers cancellation (Ctrl-C): finalize the run and let calls drain
        await controller.shutdown()

    return report


def main():
    """Main entry point for run CLI."""
    parser = argparse.ArgumentParser(
        description="Fire fixed-size batches of HTTP requests once per second"
    )
    parser.add_argument("--url", type=str, required=True, help="Target URL")
    parser.add_argument(
        "--method",
        type=str.upper,
        choices=[m.value for m in HttpMethod],
        default=HttpMethod.GET.value,
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        required=True,
        help="Requests launched per second",
    )
    parser.add_argument(
        "--duration",
        type=int,
        required=True,
        help="Test duration in seconds",
    )

    body_group = parser.add_mutually_exclusive_group()
    body_group.add_argument("--body", type=str, help="JSON request body (POST/PUT only)")
    body_group.add_argument("--body-file", type=str, help="File containing the JSON request body")

    parser.add_argument("--output", type=str, help="Output TSV file path for the report")
    parser.add_argument("--csv", type=str, help="Output CSV file path for the report")
    parser.add_argument("--chart", type=str, help="Output chart PNG path")
    parser.add_argument("--no-chart", action="store_true", help="Skip chart generation")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    body = args.body
    if args.body_file:
        if not Path(args.body_file).is_file():
            print(f"Error: Body file '{args.body_file}' does not exist")
            sys.exit(1)
        body = asyncio.run(read_body_file(args.body_file))

    try:
        config = TestConfig.from_dict({
            "url": args.url,
            "method": args.method,
            "concurrency": args.concurrency,
            "duration": args.duration,
            "body": body,
        })
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        report = asyncio.run(run_load_test(config))
    except KeyboardInterrupt:
        print("\nTest interrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error running load test: {e}")
        sys.exit(1)

    if report is None:
        print("\nNo requests completed; nothing to report.")
        sys.exit(1)

    aggregator = ReportAggregator()
    aggregator.add_report(report)
    aggregator.print_detailed_report(report)

    if args.output:
        aggregator.to_tsv(args.output)
        print(f"\nResults saved to: {args.output}")
    if args.csv:
        aggregator.to_csv(args.csv)
        print(f"Results saved to: {args.csv}")

    if not args.no_chart:
        generate_report_chart(report, output_path=args.chart, show=False)


if __name__ == "__main__":
    main()
