"""CLI for host resource sampling."""

import argparse
import sys

from ..core.errors import ResourceReadError
from ..core.resources import sample_resources


def main():
    """Main entry point for resources CLI."""
    parser = argparse.ArgumentParser(
        description="Show host CPU/memory usage and a suggested concurrency"
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=0.5,
        help="Seconds to sample CPU usage over (default: 0.5)",
    )
    args = parser.parse_args()

    try:
        snapshot = sample_resources(cpu_interval=args.interval)
    except ResourceReadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\n" + "=" * 40)
    print("HOST RESOURCES")
    print("=" * 40)
    print(f"CPU Usage:             {snapshot.cpu_usage_percent:.2f}%")
    print(f"Free Memory:           {snapshot.free_memory_percent:.2f}%")
    print(f"Total Memory:          {snapshot.total_memory_gb:.2f} GB")
    print(f"Logical Cores:         {snapshot.logical_core_count}")
    print(f"Suggested Concurrency: {snapshot.suggested_concurrency}")
    print("=" * 40)


if __name__ == "__main__":
    main()
