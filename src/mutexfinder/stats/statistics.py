"""
Gene set statistics read from the edge view of an alteration matrix.

For a gene set G the testers track, on the observed and on every shuffled
matrix:

- the sample-hit histogram H: sample index -> number of G-member edges at
  that sample (samples without hits are absent). Its size is the coverage
  of G.
- the gene-to-indices map I: member gene -> samples the gene hits.
- the participation score of each member,
  ``h(g) = sum of H[s] over s in I[g]``. This counts g itself once at each
  of its samples, plus every other member hitting the same samples. It
  measures how much g shares its samples with the rest of the set, which is
  the per-member evidence for (low h) exclusivity or (high h) co-occurrence.

Statistics are computed with numpy over the edge arrays; histograms are kept
as dense length-S count vectors where zero means "absent".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from mutexfinder.core.alteration_matrix import AlterationMatrix

__all__ = [
    'SetSnapshot',
    'SetMeasurer',
    'sample_hit_counts',
    'gene_to_sample_indices',
    'participation_scores',
]


@dataclass
class SetSnapshot:
    """
    Statistics of one gene set on one matrix state.

    Attributes:
        coverage: Samples hit by at least one member
        sample_hits: Dense histogram H (length S, zero = no hit)
        participation: Member gene -> participation score h
    """

    coverage: int
    sample_hits: NDArray[np.int64]
    participation: dict[str, int]

    def histogram(self) -> dict[int, int]:
        """Sparse form of H with zero-count samples left out."""
        nonzero = np.flatnonzero(self.sample_hits)
        return {int(s): int(self.sample_hits[s]) for s in nonzero}


class SetMeasurer:
    """
    Measures one gene set on one matrix, repeatedly, as the matrix is shuffled.

    Members absent from the matrix are left out; member order is sorted so
    results are independent of set iteration order.
    """

    def __init__(self, matrix: AlterationMatrix, genes: Iterable[str]):
        self.matrix = matrix
        self.genes = sorted(g for g in set(genes) if g in matrix)
        self.rows = np.array([matrix.row_index(g) for g in self.genes], dtype=np.int64)

    def measure(self) -> SetSnapshot:
        edges = self.matrix.edges
        in_set = np.isin(edges.gene_index, self.rows)
        samples = edges.sample_index[in_set]

        hits = np.bincount(samples, minlength=self.matrix.n_samples)
        totals = np.bincount(
            edges.gene_index[in_set],
            weights=hits[samples],
            minlength=self.matrix.n_genes,
        )
        participation = {
            gene: int(totals[row]) for gene, row in zip(self.genes, self.rows.tolist())
        }
        return SetSnapshot(
            coverage=int(np.count_nonzero(hits)),
            sample_hits=hits.astype(np.int64),
            participation=participation,
        )


def sample_hit_counts(matrix: AlterationMatrix, genes: Iterable[str]) -> dict[int, int]:
    """Sample-hit histogram H of a gene set (samples without hits are absent)."""
    return SetMeasurer(matrix, genes).measure().histogram()


def gene_to_sample_indices(matrix: AlterationMatrix, genes: Iterable[str]) -> dict[str, set[int]]:
    """
    Samples hit by each member, read from the edge view.

    Only members with at least one alteration appear as keys.
    """
    members = {g for g in genes if g in matrix}
    rows = {matrix.row_index(g): g for g in members}
    mapping: dict[str, set[int]] = {}
    edges = matrix.edges
    for g, s in zip(edges.gene_index.tolist(), edges.sample_index.tolist()):
        gene = rows.get(g)
        if gene is not None:
            mapping.setdefault(gene, set()).add(s)
    return mapping


def participation_scores(matrix: AlterationMatrix, genes: Iterable[str]) -> dict[str, int]:
    """Participation score h of every member present in the matrix."""
    return SetMeasurer(matrix, genes).measure().participation
