"""
Annotation of result files.

- add_pathway_names: results of pathway gene sets carry pathway ids only;
  this inserts a ``Name`` column after ``ID`` using a pathway catalog.
- annotate_set_members: turns one per-gene p-value file into a member table
  with mutation counts and the overlaps of each member with the others.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.io.sources import PathwayCatalog, RankedGeneList
from mutexfinder.io.writers import read_member_pvalues, read_result_table, write_result_table

__all__ = ['add_pathway_names', 'annotate_set_members', 'MissingGenesError', 'REACTOME_ID_PREFIX']

logger = logging.getLogger(__name__)

REACTOME_ID_PREFIX = "http://identifiers.org/reactome/"


class MissingGenesError(ValueError):
    """Raised when a result file names genes the matrix does not have."""


def add_pathway_names(
    in_file: Path,
    out_file: Path,
    catalog: PathwayCatalog,
    id_prefix: str = "",
) -> pd.DataFrame:
    """
    Insert a ``Name`` column after ``ID`` in a result table.

    Args:
        in_file: Result table written by a tester
        out_file: Output path
        catalog: Source of pathway names
        id_prefix: Prefix restoring the catalog id from the short id in the
            table (e.g. ``REACTOME_ID_PREFIX``)

    Returns:
        The annotated table; unknown ids get an empty name
    """
    results = read_result_table(in_file)

    def lookup(short_id: str) -> str:
        name = catalog.name(id_prefix + short_id)
        if name is None:
            name = catalog.name(short_id)
        return name or ""

    names = [lookup(pid) for pid in results["ID"]]
    results.insert(1, "Name", names)
    write_result_table(results, out_file)
    return results


def annotate_set_members(
    in_file: Path,
    matrix: AlterationMatrix,
    out_file: Path,
    classifier: RankedGeneList | None = None,
) -> pd.DataFrame:
    """
    Member table of one gene set result.

    Output columns:
        Rank: Ranked-list classification of the gene (empty without a classifier)
        Gene: Member gene, in the order of the input file
        Mut#: Mutation count of the gene
        Ov: Summed overlap with the other members
        P-val: Member p-value from the input file
        Specific overlaps: ``OTHER=n`` for members sharing samples, by
            decreasing overlap then name

    Raises:
        MissingGenesError: If the matrix lacks a gene of the input file
    """
    pvalues = read_member_pvalues(in_file)
    genes = list(pvalues)

    missing = [g for g in genes if g not in matrix]
    if missing:
        raise MissingGenesError(
            f"Some genes are missing in the matrix, {in_file} cannot be generated "
            f"from it: {missing[:10]}"
        )

    pairwise = matrix.count_overlap_pairwise(genes)
    coverage = matrix.individual_coverage(genes)

    rows = []
    for gene in genes:
        overlaps = pairwise[gene]
        specific = sorted(
            (other for other, n in overlaps.items() if n > 0),
            key=lambda other: (-overlaps[other], other),
        )
        rank = classifier.classification(gene) if classifier is not None else None
        rows.append({
            "Rank": rank or "",
            "Gene": gene,
            "Mut#": coverage[gene],
            "Ov": sum(overlaps.values()),
            "P-val": pvalues[gene],
            "Specific overlaps": " ".join(f"{o}={overlaps[o]}" for o in specific),
        })

    table = pd.DataFrame(
        rows, columns=["Rank", "Gene", "Mut#", "Ov", "P-val", "Specific overlaps"]
    )
    write_result_table(table, out_file)
    logger.info(f"Annotated {len(table)} members of {in_file}")
    return table
