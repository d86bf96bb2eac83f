"""Main entry point for the hulk package.

Usage:
    python -m hulk run --url https://example.test/ok --concurrency 5 --duration 10
    python -m hulk serve --port 3001
    python -m hulk resources
"""

import sys


def main():
    """Main entry point that dispatches to subcommands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1]

    if command in ["-h", "--help", "help"]:
        print_help()
        sys.exit(0)

    # Remove the command from argv so subcommand parsers see correct args
    sys.argv = [sys.argv[0]] + sys.argv[2:]

    if command == "run":
        from .cli.run import main as run_main

        run_main()
    elif command == "serve":
        from .cli.serve import main as serve_main

        serve_main()
    elif command == "resources":
        from .cli.resources import main as resources_main

        resources_main()
    else:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)


def print_help():
    """Print help message."""
    print(
        """hulk - HTTP load testing engine

Usage: python -m hulk <command> [options]

Commands:
    run           Run a single load test in the foreground
    serve         Start the HTTP API for the dashboard
    resources     Show host resources and a suggested concurrency

Examples:
    # Fire 50 GET requests per second for 30 seconds
    python -m hulk run --url http://localhost:8080/health --concurrency 50 --duration 30

    # POST a JSON body and save a chart and TSV
    python -m hulk run --url http://localhost:8080/items --method POST \\
        --body '{"name": "x"}' --concurrency 10 --duration 20 \\
        --output results.tsv --chart results.png

    # Serve the API on port 3001
    python -m hulk serve --port 3001

For command-specific help:
    python -m hulk <command> --help
"""
    )


if __name__ == "__main__":
    main()
