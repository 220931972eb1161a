"""Command line entry for the rental agreement generator."""

import sys

from cli.agreement_cli import main as run_cli


def main() -> int:
    """Run the agreement CLI with the process arguments."""
    return run_cli()


if __name__ == "__main__":
    sys.exit(main())
