"""
MutexFinder generate-matrix command - Alteration matrix from an event table.

Usage:
    mutexfinder generate-matrix --events events.tsv --filter study=SSC -o matrix.txt
"""

import argparse
import logging
from pathlib import Path

from mutexfinder.io.loaders import matrix_from_events
from mutexfinder.io.sources import EventTable, parse_filter
from mutexfinder.io.writers import write_matrix

logger = logging.getLogger(__name__)


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the generate-matrix subcommand."""
    parser = subparsers.add_parser(
        "generate-matrix",
        help="Build an alteration matrix from an event table",
        description="Write the gene x sample alteration matrix of the (filtered) "
                    "events of an event table",
    )
    parser.add_argument("--events", type=Path, required=True,
                        help="Event table with 'sample' and 'gene' columns")
    parser.add_argument("--filter", default=None,
                        help="Event filter, e.g. 'study=SSC,phenotype=proband'")
    parser.add_argument("--output", "-o", type=Path, required=True,
                        help="Output matrix file")
    parser.set_defaults(func=run_generate_matrix)


def run_generate_matrix(args: argparse.Namespace) -> int:
    """Execute the generate-matrix command."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    events = EventTable(args.events).stream(parse_filter(args.filter))
    matrix = matrix_from_events(events)
    write_matrix(matrix, args.output)
    logger.info(
        f"Wrote {matrix.n_genes} genes x {matrix.n_samples} samples "
        f"({matrix.n_edges} alterations) to {args.output}"
    )
    return 0
