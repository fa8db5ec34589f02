"""
MutexFinder calculate commands - Permutation testing of gene sets.

Usage:
    mutexfinder calculate --matrix matrix.txt --gene-sets sets.txt -o results/
    mutexfinder calculate --events events.tsv --filter study=SSC \\
        --ranked-genes sfari.tsv -o results/sfari
    mutexfinder calculate-differential --test-matrix case.txt --ctrl-matrix ctrl.txt \\
        --pathways reactome.tsv -o results/diff --config run.yaml

Outputs (in the output directory):
    results.txt                 One row per gene set, sorted by mutex p-value
    <set>-mutex.txt             Member p-values for the mutex pattern
    <set>-cooc.txt              Member p-values for the cooc pattern
    results-with-names.txt      results.txt with pathway names (--pathways only)
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path

from mutexfinder.cli._validators import _non_negative_int, _positive_int
from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.core.shuffler import DEFAULT_RANDOMIZATION_STRENGTH
from mutexfinder.io.annotate import add_pathway_names
from mutexfinder.io.gene_sets import GeneSet, GeneSetLoader
from mutexfinder.io.loaders import load_matrix, matrix_from_events
from mutexfinder.io.sources import EventTable, PathwayTable, RankedGeneTable, parse_filter
from mutexfinder.io.writers import RESULTS_FILENAME
from mutexfinder.stats.differential import DifferentialMutexTester
from mutexfinder.stats.mutex import MutexTester

logger = logging.getLogger(__name__)

NAMED_RESULTS_FILENAME = "results-with-names.txt"


def _add_gene_set_arguments(parser: argparse.ArgumentParser) -> None:
    sets = parser.add_argument_group("Gene sets (choose one source)")
    source = sets.add_mutually_exclusive_group(required=True)
    source.add_argument("--gene-sets", type=Path,
                        help="Gene set file: name<TAB>GENE1 GENE2 ...")
    source.add_argument("--ranked-genes", type=Path,
                        help="Ranked gene list (gene<TAB>rank); tests cumulative rank tiers")
    source.add_argument("--pathways", type=Path,
                        help="Pathway table (id<TAB>name<TAB>GENE1 GENE2 ...)")
    sets.add_argument("--max-rank", type=_positive_int, default=6,
                      help="Deepest rank tier with --ranked-genes (default: 6)")
    sets.add_argument("--ranked-prefix", default="SFARI",
                      help="Name prefix of rank tier gene sets (default: SFARI)")
    sets.add_argument("--pathway-id-prefix", default="",
                      help="Prefix restoring full pathway ids for name lookup")


def _add_permutation_arguments(parser: argparse.ArgumentParser) -> None:
    perm = parser.add_argument_group("Permutation")
    perm.add_argument("--iterations", "-n", type=_positive_int, default=1000,
                      help="Number of shuffles (default: 1000)")
    perm.add_argument("--randomization-strength", type=_positive_int,
                      default=DEFAULT_RANDOMIZATION_STRENGTH,
                      help=f"Trial swaps per edge in each shuffle (default: {DEFAULT_RANDOMIZATION_STRENGTH})")
    perm.add_argument("--seed", "-s", type=_non_negative_int, default=None,
                      help="Random seed for reproducible runs")
    perm.add_argument("--n-jobs", "-j", type=_positive_int, default=1,
                      help="Worker processes; each shuffles its own matrix copy (default: 1)")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML/JSON config with a 'permutation' section; CLI arguments override it")
    parser.add_argument("--output", "-o", type=Path, required=True,
                        help="Output directory")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging")


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the calculate and calculate-differential subcommands."""
    parser = subparsers.add_parser(
        "calculate",
        help="Mutex/cooc test of gene sets on one matrix",
        allow_abbrev=False,
        description="Test gene sets for mutual exclusivity and co-occurrence against "
                    "degree-preserving shuffles of the alteration matrix",
    )
    matrix_source = parser.add_mutually_exclusive_group(required=True)
    matrix_source.add_argument("--matrix", type=Path,
                               help="Alteration matrix file (tab-separated, genes x samples)")
    matrix_source.add_argument("--events", type=Path,
                               help="Event table with 'sample' and 'gene' columns")
    parser.add_argument("--filter", default=None,
                        help="Event filter, e.g. 'study=SSC,phenotype=proband'")
    _add_gene_set_arguments(parser)
    _add_permutation_arguments(parser)
    parser.set_defaults(func=run_calculate)

    parser = subparsers.add_parser(
        "calculate-differential",
        help="Test vs control differential test",
        allow_abbrev=False,
        description="Test whether gene sets are more mutually exclusive in a test "
                    "cohort than in a control cohort",
    )
    matrices = parser.add_argument_group("Matrices (two files, or one event table with two filters)")
    matrices.add_argument("--test-matrix", type=Path, help="Test cohort matrix file")
    matrices.add_argument("--ctrl-matrix", type=Path, help="Control cohort matrix file")
    matrices.add_argument("--events", type=Path,
                          help="Event table with 'sample' and 'gene' columns")
    matrices.add_argument("--test-filter", default=None,
                          help="Event filter selecting the test cohort")
    matrices.add_argument("--ctrl-filter", default=None,
                          help="Event filter selecting the control cohort")
    _add_gene_set_arguments(parser)
    _add_permutation_arguments(parser)
    parser.set_defaults(func=run_calculate_differential)


def _apply_config(args: argparse.Namespace) -> argparse.Namespace:
    """Merge --config into the arguments; explicit CLI values win."""
    if not args.config:
        return args
    from mutexfinder.cli.config import load_config, merge_config_with_args

    logger.info(f"Loading configuration from: {args.config}")
    config = load_config(args.config)
    return merge_config_with_args(config, args, getattr(args, "cli_args", None))


def _load_gene_sets(args: argparse.Namespace, universe) -> tuple[dict[str, GeneSet], PathwayTable | None]:
    loader = GeneSetLoader(universe)
    if args.gene_sets:
        return loader.load_file(args.gene_sets), None
    if args.ranked_genes:
        ranked = RankedGeneTable(args.ranked_genes)
        return loader.load_ranked(ranked, max_rank=args.max_rank, prefix=args.ranked_prefix), None
    catalog = PathwayTable(args.pathways)
    return loader.load_pathways(catalog), catalog


def _finish(args: argparse.Namespace, catalog: PathwayTable | None, start_time: datetime) -> None:
    if catalog is not None:
        add_pathway_names(
            args.output / RESULTS_FILENAME,
            args.output / NAMED_RESULTS_FILENAME,
            catalog,
            id_prefix=args.pathway_id_prefix,
        )
    elapsed = (datetime.now() - start_time).total_seconds()
    logger.info(f"Results written to {args.output} ({elapsed:.1f}s)")


def run_calculate(args: argparse.Namespace) -> int:
    """Execute the calculate command."""
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    args = _apply_config(args)
    start_time = datetime.now()

    if args.matrix:
        matrix = load_matrix(args.matrix)
    else:
        events = EventTable(args.events).stream(parse_filter(args.filter))
        matrix = matrix_from_events(events)
    logger.info(f"Matrix: {matrix.n_genes} genes x {matrix.n_samples} samples, {matrix.n_edges} alterations")

    gene_sets, catalog = _load_gene_sets(args, matrix.genes)
    if not gene_sets:
        logger.warning("No gene set survived filtering; writing an empty result table")

    tester = MutexTester(
        matrix,
        gene_sets,
        args.output,
        args.iterations,
        randomization_strength=args.randomization_strength,
        seed=args.seed,
        n_jobs=args.n_jobs,
    )
    tester.run()
    _finish(args, catalog, start_time)
    return 0


def _load_differential_matrices(args: argparse.Namespace) -> tuple[AlterationMatrix, AlterationMatrix]:
    if args.test_matrix or args.ctrl_matrix:
        if not (args.test_matrix and args.ctrl_matrix):
            raise ValueError("--test-matrix and --ctrl-matrix must be given together")
        if args.events:
            raise ValueError("--events cannot be combined with matrix files")
        return load_matrix(args.test_matrix), load_matrix(args.ctrl_matrix)

    if not args.events:
        raise ValueError("Either --test-matrix/--ctrl-matrix or --events is required")
    if not (args.test_filter and args.ctrl_filter):
        raise ValueError("--events requires both --test-filter and --ctrl-filter")
    table = EventTable(args.events)
    test = matrix_from_events(table.stream(parse_filter(args.test_filter)))
    ctrl = matrix_from_events(table.stream(parse_filter(args.ctrl_filter)))
    return test, ctrl


def run_calculate_differential(args: argparse.Namespace) -> int:
    """Execute the calculate-differential command."""
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    args = _apply_config(args)
    start_time = datetime.now()

    test_matrix, ctrl_matrix = _load_differential_matrices(args)
    logger.info(f"Test matrix: {test_matrix.n_genes} genes x {test_matrix.n_samples} samples")
    logger.info(f"Control matrix: {ctrl_matrix.n_genes} genes x {ctrl_matrix.n_samples} samples")

    # Gene sets may use genes altered in either cohort
    universe = set(test_matrix.genes) | set(ctrl_matrix.genes)
    gene_sets, catalog = _load_gene_sets(args, universe)
    if not gene_sets:
        logger.warning("No gene set survived filtering; writing an empty result table")

    tester = DifferentialMutexTester(
        test_matrix,
        ctrl_matrix,
        gene_sets,
        args.output,
        args.iterations,
        randomization_strength=args.randomization_strength,
        seed=args.seed,
        n_jobs=args.n_jobs,
    )
    tester.run()
    _finish(args, catalog, start_time)
    return 0
