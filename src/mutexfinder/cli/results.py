"""
MutexFinder result post-processing commands.

Usage:
    mutexfinder add-pathway-names -i results/results.txt -o named.txt --pathways reactome.tsv
    mutexfinder annotate-set-members -i results/SET-mutex.txt --matrix matrix.txt -o members.txt
    mutexfinder explore-significance -i results/results.txt -o explore.txt --pattern mutex --fdr 0.1 0.2
    mutexfinder filter-results-to-most-hit -i results/results.txt -o top.txt --pattern mutex --top 20
    mutexfinder find-significant-members -d results/ -o members.txt --pattern mutex --fdr 0.1
"""

import argparse
import logging
from pathlib import Path

from mutexfinder.cli._validators import _fdr, _pattern, _positive_int
from mutexfinder.io.annotate import add_pathway_names, annotate_set_members
from mutexfinder.io.loaders import load_matrix
from mutexfinder.io.sources import PathwayTable, RankedGeneTable
from mutexfinder.stats.significance import (
    explore_significance,
    filter_to_top_hit,
    find_significant_members,
)

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the post-processing subcommands."""
    parser = subparsers.add_parser(
        "add-pathway-names",
        help="Add pathway names to a result table",
    )
    parser.add_argument("--input", "-i", type=Path, required=True, help="Result table")
    parser.add_argument("--output", "-o", type=Path, required=True, help="Output table")
    parser.add_argument("--pathways", type=Path, required=True,
                        help="Pathway table (id<TAB>name<TAB>GENE1 GENE2 ...)")
    parser.add_argument("--id-prefix", default="",
                        help="Prefix restoring full pathway ids from the IDs in the table")
    parser.set_defaults(func=run_add_pathway_names)

    parser = subparsers.add_parser(
        "annotate-set-members",
        help="Member table of one gene set result",
        description="Mutation counts and overlaps of the members listed in a per-gene p-value file",
    )
    parser.add_argument("--input", "-i", type=Path, required=True,
                        help="Per-gene p-value file (<set>-mutex.txt or <set>-cooc.txt)")
    parser.add_argument("--matrix", type=Path, required=True, help="Alteration matrix file")
    parser.add_argument("--output", "-o", type=Path, required=True, help="Output table")
    parser.add_argument("--ranked-genes", type=Path, default=None,
                        help="Ranked gene list for the Rank column")
    parser.set_defaults(func=run_annotate_set_members)

    parser = subparsers.add_parser(
        "explore-significance",
        help="Significant set counts per hit threshold",
        description="For each hit threshold, count gene sets selected at each FDR "
                    "when only sets with at least that many hits are tested",
    )
    parser.add_argument("--input", "-i", type=Path, required=True, help="Result table")
    parser.add_argument("--output", "-o", type=Path, required=True, help="Output file")
    parser.add_argument("--pattern", type=_pattern, required=True, help="mutex or cooc")
    parser.add_argument("--fdr", type=_fdr, nargs="+", required=True,
                        help="One or more FDR thresholds")
    parser.set_defaults(func=run_explore_significance)

    parser = subparsers.add_parser(
        "filter-results-to-most-hit",
        help="Keep the most hit gene sets",
    )
    parser.add_argument("--input", "-i", type=Path, required=True, help="Result table")
    parser.add_argument("--output", "-o", type=Path, required=True, help="Output table")
    parser.add_argument("--pattern", type=_pattern, required=True, help="mutex or cooc")
    parser.add_argument("--top", type=_positive_int, required=True,
                        help="Number of gene sets to keep")
    parser.set_defaults(func=run_filter_to_top_hit)

    parser = subparsers.add_parser(
        "find-significant-members",
        help="FDR-selected members of every gene set",
    )
    parser.add_argument("--directory", "-d", type=Path, required=True,
                        help="Result directory of a calculate run")
    parser.add_argument("--output", "-o", type=Path, required=True, help="Output file")
    parser.add_argument("--pattern", type=_pattern, required=True, help="mutex or cooc")
    parser.add_argument("--fdr", type=_fdr, default=0.1, help="FDR threshold (default: 0.1)")
    parser.set_defaults(func=run_find_significant_members)


def run_add_pathway_names(args: argparse.Namespace) -> int:
    """Execute the add-pathway-names command."""
    _configure_logging()
    add_pathway_names(args.input, args.output, PathwayTable(args.pathways), id_prefix=args.id_prefix)
    logger.info(f"Wrote {args.output}")
    return 0


def run_annotate_set_members(args: argparse.Namespace) -> int:
    """Execute the annotate-set-members command."""
    _configure_logging()
    classifier = RankedGeneTable(args.ranked_genes) if args.ranked_genes else None
    annotate_set_members(args.input, load_matrix(args.matrix), args.output, classifier=classifier)
    return 0


def run_explore_significance(args: argparse.Namespace) -> int:
    """Execute the explore-significance command."""
    _configure_logging()
    explore_significance(args.input, args.output, args.pattern, args.fdr)
    return 0


def run_filter_to_top_hit(args: argparse.Namespace) -> int:
    """Execute the filter-results-to-most-hit command."""
    _configure_logging()
    table = filter_to_top_hit(args.input, args.output, args.pattern, args.top)
    logger.info(f"Kept {len(table)} gene sets in {args.output}")
    return 0


def run_find_significant_members(args: argparse.Namespace) -> int:
    """Execute the find-significant-members command."""
    _configure_logging()
    find_significant_members(args.directory, args.output, args.pattern.file_suffix, args.fdr)
    return 0
