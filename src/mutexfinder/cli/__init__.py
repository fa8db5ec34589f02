"""
MutexFinder CLI - Command-line interface for gene set mutual exclusivity testing.

Commands:
    mutexfinder calculate                   - Mutex/cooc test of gene sets on one matrix
    mutexfinder calculate-differential      - Test vs control differential test
    mutexfinder generate-matrix             - Build an alteration matrix from an event table
    mutexfinder add-pathway-names           - Add pathway names to a result table
    mutexfinder annotate-set-members        - Member table of one gene set result
    mutexfinder explore-significance        - Significant set counts per hit threshold
    mutexfinder filter-results-to-most-hit  - Keep the most hit gene sets
    mutexfinder find-significant-members    - FDR-selected members of every gene set
"""

import argparse
import logging
import sys
from typing import Optional, List

from mutexfinder.io.annotate import MissingGenesError
from mutexfinder.stats.mutex import RunCancelled

logger = logging.getLogger(__name__)


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for mutexfinder."""
    parser = argparse.ArgumentParser(
        prog="mutexfinder",
        description="Mutual exclusivity and co-occurrence testing of gene sets in de novo mutation data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  calculate                   Mutex/cooc test of gene sets on one matrix
  calculate-differential      Test vs control differential test
  generate-matrix             Build an alteration matrix from an event table
  add-pathway-names           Add pathway names to a result table
  annotate-set-members        Member table of one gene set result
  explore-significance        Significant set counts per hit threshold
  filter-results-to-most-hit  Keep the most hit gene sets
  find-significant-members    FDR-selected members of every gene set

Examples:
  mutexfinder calculate --matrix matrix.txt --gene-sets sets.txt -o results/ -n 10000
  mutexfinder calculate-differential --test-matrix case.txt --ctrl-matrix ctrl.txt \\
      --pathways reactome.txt -o results/diff --n-jobs 4
  mutexfinder explore-significance -i results/results.txt -o explore.txt --pattern mutex --fdr 0.1 0.2
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Import and register subcommands
    from mutexfinder.cli import calculate, matrix, results
    calculate.register_parser(subparsers)
    matrix.register_parser(subparsers)
    results.register_parser(subparsers)

    argv = list(args) if args is not None else sys.argv[1:]
    parsed_args = parser.parse_args(argv)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Raw arguments after the command name, for config override detection
    parsed_args.cli_args = argv[argv.index(parsed_args.command) + 1:]

    # Dispatch to subcommand
    try:
        return parsed_args.func(parsed_args)
    except (FileNotFoundError, ValueError, OSError, RunCancelled) as e:
        if isinstance(e, MissingGenesError):
            logger.error(f"Cannot annotate members: {e}")
        else:
            logger.error(f"{parsed_args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
