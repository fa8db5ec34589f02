"""
Differential mutual exclusivity between a test and a control matrix.

Asks whether a gene set is more mutually exclusive in the test cohort than in
the control cohort (or more co-occurring). Both matrices are shuffled in
every iteration, each by its own degree-preserving shuffler, and the
statistics are differences between the two:

- group:  Δ  = coverage(test) - coverage(control)
- member: Δh = participation(test) - participation(control)

Meets:
    mutex         Δ'  >= Δ0
    cooc          Δ'  <= Δ0
    member mutex  Δh' <= Δh0
    member cooc   Δh' >= Δh0

The raw coverage difference is used, not a normalized one, so results stay
comparable with earlier runs of this test.

A member missing from one of the matrices contributes zero hits on that
side.

Examples:
    >>> from mutexfinder.stats.differential import DifferentialMutexTester
    >>> tester = DifferentialMutexTester(test, ctrl, gene_sets, Path("out"), 1000, seed=1)
    >>> results = tester.run()
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.core.pattern import PatternType
from mutexfinder.core.shuffler import DEFAULT_RANDOMIZATION_STRENGTH
from mutexfinder.io.gene_sets import GeneSet
from mutexfinder.stats.mutex import MutexTester
from mutexfinder.stats.statistics import SetSnapshot

__all__ = ['DifferentialMutexTester']


class DifferentialMutexTester(MutexTester):
    """
    Paired-matrix tester on coverage and participation differences.

    Attributes:
        matrix: Test alteration matrix
        ctrl_matrix: Control alteration matrix
    """

    described_column_names = ["Coverage Test", "Coverage Ctrl", "Overlap Test", "Overlap Ctrl"]
    pvalue_columns = {
        PatternType.MUTEX: "Differential mutex p-value",
        PatternType.COOC: "Differential cooc p-value",
    }

    def __init__(
        self,
        test_matrix: AlterationMatrix,
        ctrl_matrix: AlterationMatrix,
        gene_sets: Mapping[str, GeneSet],
        out_dir: Path,
        iterations: int,
        *,
        randomization_strength: int = DEFAULT_RANDOMIZATION_STRENGTH,
        seed: int | None = None,
        n_jobs: int = 1,
        should_stop: Callable[[], bool] | None = None,
    ):
        if test_matrix is ctrl_matrix:
            raise ValueError("test and control matrices must be distinct objects")
        self.ctrl_matrix = ctrl_matrix
        super().__init__(
            test_matrix,
            gene_sets,
            out_dir,
            iterations,
            randomization_strength=randomization_strength,
            seed=seed,
            n_jobs=n_jobs,
            should_stop=should_stop,
        )

    @property
    def matrices(self) -> list[AlterationMatrix]:
        return [self.matrix, self.ctrl_matrix]

    def statistics(self, snapshots: list[SetSnapshot]) -> tuple[int, dict[str, int]]:
        test, ctrl = snapshots
        genes = set(test.participation) | set(ctrl.participation)
        delta_h = {
            gene: test.participation.get(gene, 0) - ctrl.participation.get(gene, 0)
            for gene in sorted(genes)
        }
        return test.coverage - ctrl.coverage, delta_h

    def observed_columns(self, gene_set: GeneSet) -> dict[str, int]:
        return {
            "Coverage Test": self.matrix.count_coverage(gene_set.genes),
            "Coverage Ctrl": self.ctrl_matrix.count_coverage(gene_set.genes),
            "Overlap Test": self.matrix.count_overlap(gene_set.genes),
            "Overlap Ctrl": self.ctrl_matrix.count_overlap(gene_set.genes),
        }
