"""
Mutual exclusivity and co-occurrence testing of gene sets.

Tests whether the members of each gene set are altered in fewer shared
samples than expected (mutual exclusivity, mutex) or in more shared samples
than expected (co-occurrence, cooc). The null distribution comes from
degree-preserving shuffles of the alteration matrix.

Per-iteration loop:
    1. Shuffle the matrix once (Q × E trial swaps)
    2. For each gene set, recompute coverage and member participation scores
    3. Mutex meet when shuffled coverage >= observed coverage,
       cooc meet when shuffled coverage <= observed coverage
    4. Member mutex meet when shuffled participation <= observed,
       member cooc meet when shuffled participation >= observed

p-value = meets / iterations, for gene sets and for members alike.

A larger-than-observed coverage in a shuffled matrix means the members
collide less there than in the data, so the data is at least as exclusive as
that null draw. The cooc tail is the mirror image.

Parallel replicas:
    With ``n_jobs > 1`` the iterations are split over worker processes. Each
    worker shuffles its own copy of the matrix with its own seed spawned from
    the run seed; meet counters are summed. Results are deterministic for a
    fixed (seed, n_jobs) pair.

Examples:
    >>> from mutexfinder.stats.mutex import MutexTester
    >>> tester = MutexTester(matrix, gene_sets, Path("out"), iterations=1000, seed=42)
    >>> results = tester.run()
    >>> results[["ID", "Mutex p-value"]].head()
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Mapping
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd

from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.core.pattern import PatternType
from mutexfinder.core.shuffler import DEFAULT_RANDOMIZATION_STRENGTH, Shuffler
from mutexfinder.io.gene_sets import GeneSet
from mutexfinder.io.writers import RESULTS_FILENAME, write_member_pvalues, write_result_table
from mutexfinder.stats.statistics import SetMeasurer, SetSnapshot

__all__ = ['MutexTester', 'MeetCounts', 'RunCancelled']

logger = logging.getLogger(__name__)


class RunCancelled(RuntimeError):
    """Raised when a test run is stopped by its cancellation predicate."""


@dataclass
class MeetCounts:
    """
    Tail counters of a permutation run.

    Attributes:
        iterations: Number of shuffles the counters cover
        group_mutex: Gene set -> mutex meets
        group_cooc: Gene set -> cooc meets
        gene_mutex: Gene set -> (member -> mutex meets)
        gene_cooc: Gene set -> (member -> cooc meets)
    """

    iterations: int = 0
    group_mutex: dict[str, int] = field(default_factory=dict)
    group_cooc: dict[str, int] = field(default_factory=dict)
    gene_mutex: dict[str, dict[str, int]] = field(default_factory=dict)
    gene_cooc: dict[str, dict[str, int]] = field(default_factory=dict)

    @classmethod
    def zeros(cls, members: Mapping[str, list[str]]) -> MeetCounts:
        """Zero counters for gene sets with the given scored members."""
        return cls(
            iterations=0,
            group_mutex={name: 0 for name in members},
            group_cooc={name: 0 for name in members},
            gene_mutex={name: {g: 0 for g in genes} for name, genes in members.items()},
            gene_cooc={name: {g: 0 for g in genes} for name, genes in members.items()},
        )

    def merge(self, other: MeetCounts) -> MeetCounts:
        """Sum of two counters over the same gene sets (order independent)."""
        def add_nested(a, b):
            return {name: {g: n + b[name][g] for g, n in genes.items()} for name, genes in a.items()}

        return MeetCounts(
            iterations=self.iterations + other.iterations,
            group_mutex={k: v + other.group_mutex[k] for k, v in self.group_mutex.items()},
            group_cooc={k: v + other.group_cooc[k] for k, v in self.group_cooc.items()},
            gene_mutex=add_nested(self.gene_mutex, other.gene_mutex),
            gene_cooc=add_nested(self.gene_cooc, other.gene_cooc),
        )

    def group_pvalues(self, pattern: PatternType) -> dict[str, float]:
        meets = self.group_mutex if pattern is PatternType.MUTEX else self.group_cooc
        return {name: n / self.iterations for name, n in meets.items()}

    def gene_pvalues(self, pattern: PatternType) -> dict[str, dict[str, float]]:
        meets = self.gene_mutex if pattern is PatternType.MUTEX else self.gene_cooc
        return {
            name: {g: n / self.iterations for g, n in genes.items()}
            for name, genes in meets.items()
        }


def _run_replica(tester: MutexTester, iterations: int, seed: np.random.SeedSequence) -> MeetCounts:
    """Process-pool entry point: count meets on private matrix copies."""
    return tester.count_meets(iterations, seed, replicate=True)


class MutexTester:
    """
    Single-matrix mutual exclusivity / co-occurrence tester.

    The tester borrows the matrix: in the default single-process mode the
    matrix is shuffled in place, so it no longer holds the observed data after
    ``run()``. Pass ``matrix.copy()`` to keep the original.

    Attributes:
        matrix: Alteration matrix under test
        gene_sets: Gene set name -> GeneSet, in report tie-break order
        out_dir: Directory receiving results.txt and per-gene files
        iterations: Number of shuffles (N)
        randomization_strength: Trial swaps per edge in each shuffle (Q)
        seed: Run seed; None for OS entropy
        n_jobs: Worker processes for parallel replicas
        should_stop: Optional cancellation predicate checked between iterations
    """

    described_column_names = ["Coverage", "Overlap"]
    pvalue_columns = {
        PatternType.MUTEX: "Mutex p-value",
        PatternType.COOC: "Cooc p-value",
    }

    def __init__(
        self,
        matrix: AlterationMatrix,
        gene_sets: Mapping[str, GeneSet],
        out_dir: Path,
        iterations: int,
        *,
        randomization_strength: int = DEFAULT_RANDOMIZATION_STRENGTH,
        seed: int | None = None,
        n_jobs: int = 1,
        should_stop: Callable[[], bool] | None = None,
    ):
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")
        if randomization_strength < 1:
            raise ValueError(
                f"randomization_strength must be >= 1, got {randomization_strength}"
            )
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")

        self.matrix = matrix
        self.gene_sets = dict(gene_sets)
        self.out_dir = Path(out_dir)
        self.iterations = iterations
        self.randomization_strength = randomization_strength
        self.seed = seed
        self.n_jobs = n_jobs
        self.should_stop = should_stop

        for gene_set in self.gene_sets.values():
            missing = [g for g in gene_set.genes if not any(g in m for m in self.matrices)]
            if missing:
                warnings.warn(
                    f"Gene set {gene_set.name}: {len(missing)} member(s) not in matrix "
                    f"are ignored: {sorted(missing)[:5]}",
                    stacklevel=2,
                )

    def __getstate__(self) -> dict:
        # Cancellation predicates are often closures; they stay in the parent
        state = self.__dict__.copy()
        state["should_stop"] = None
        return state

    # ------------------------------------------------------------------
    # Statistics hooks (overridden by DifferentialMutexTester)
    # ------------------------------------------------------------------

    @property
    def matrices(self) -> list[AlterationMatrix]:
        """Matrices shuffled together in every iteration."""
        return [self.matrix]

    def statistics(self, snapshots: list[SetSnapshot]) -> tuple[int, dict[str, int]]:
        """
        Group statistic and member statistics from per-matrix snapshots.

        Returns:
            (coverage, member -> participation score)
        """
        snapshot = snapshots[0]
        return snapshot.coverage, dict(snapshot.participation)

    def observed_columns(self, gene_set: GeneSet) -> dict[str, int]:
        """Descriptive columns of the result table for one gene set."""
        return {
            "Coverage": self.matrix.count_coverage(gene_set.genes),
            "Overlap": self.matrix.count_overlap(gene_set.genes),
        }

    # ------------------------------------------------------------------
    # Permutation loop
    # ------------------------------------------------------------------

    def count_meets(
        self,
        iterations: int,
        seed: int | np.random.SeedSequence | None,
        replicate: bool = False,
    ) -> MeetCounts:
        """
        Shuffle ``iterations`` times and count tail meets.

        Args:
            iterations: Number of shuffles
            seed: Seed for this run; one child seed is spawned per matrix
            replicate: Work on copies of the matrices instead of shuffling
                them in place

        Raises:
            RunCancelled: If the cancellation predicate fires
        """
        matrices = [m.copy() for m in self.matrices] if replicate else self.matrices
        if not isinstance(seed, np.random.SeedSequence):
            seed = np.random.SeedSequence(seed)
        shufflers = [
            Shuffler(m, self.randomization_strength, child)
            for m, child in zip(matrices, seed.spawn(len(matrices)))
        ]

        measurers = {
            name: [SetMeasurer(m, gene_set.genes) for m in matrices]
            for name, gene_set in self.gene_sets.items()
        }
        observed = {
            name: self.statistics([ms.measure() for ms in mlist])
            for name, mlist in measurers.items()
        }
        counts = MeetCounts.zeros({name: sorted(obs[1]) for name, obs in observed.items()})

        progress_step = max(1, iterations // 10)
        for i in range(iterations):
            if self.should_stop is not None and self.should_stop():
                raise RunCancelled(f"Run cancelled after {i} of {iterations} iterations")

            for shuffler in shufflers:
                shuffler.shuffle()

            for name, mlist in measurers.items():
                group, genes = self.statistics([ms.measure() for ms in mlist])
                group_obs, genes_obs = observed[name]

                if group >= group_obs:
                    counts.group_mutex[name] += 1
                if group <= group_obs:
                    counts.group_cooc[name] += 1

                mutex_meets = counts.gene_mutex[name]
                cooc_meets = counts.gene_cooc[name]
                # Unaltered members score h = 0 every time and meet both tails
                for gene, value in genes.items():
                    if value <= genes_obs[gene]:
                        mutex_meets[gene] += 1
                    if value >= genes_obs[gene]:
                        cooc_meets[gene] += 1

            counts.iterations += 1
            if (i + 1) % progress_step == 0:
                logger.info(f"Shuffled {i + 1}/{iterations} times")

        return counts

    def _count_meets_parallel(self) -> MeetCounts:
        n_jobs = min(self.n_jobs, self.iterations)
        chunks = [self.iterations // n_jobs] * n_jobs
        for k in range(self.iterations % n_jobs):
            chunks[k] += 1
        seeds = np.random.SeedSequence(self.seed).spawn(n_jobs)

        logger.info(f"Running {self.iterations} shuffles in {n_jobs} replicas")
        results: list[MeetCounts | None] = [None] * n_jobs
        with ProcessPoolExecutor(max_workers=n_jobs) as executor:
            futures = {
                executor.submit(_run_replica, self, n, s): k
                for k, (n, s) in enumerate(zip(chunks, seeds))
            }
            pending = set(futures)
            while pending:
                done, pending = wait(pending, timeout=1.0, return_when=FIRST_COMPLETED)
                for future in done:
                    results[futures[future]] = future.result()
                if pending and self.should_stop is not None and self.should_stop():
                    for future in pending:
                        future.cancel()
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise RunCancelled("Run cancelled while replicas were running")

        total = results[0]
        for part in results[1:]:
            total = total.merge(part)
        return total

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self) -> pd.DataFrame:
        """
        Run the test and write all result files.

        Writes ``results.txt`` and two per-gene files per gene set into
        ``out_dir``.

        Returns:
            The result table as written (sorted by mutex p-value)

        Raises:
            OSError: If a result file cannot be written
            RunCancelled: If the cancellation predicate fires
        """
        self.out_dir.mkdir(parents=True, exist_ok=True)

        # Observed descriptive columns come from the unshuffled matrices
        described = {
            name: self.observed_columns(gene_set)
            for name, gene_set in self.gene_sets.items()
        }

        logger.info(
            f"Testing {len(self.gene_sets)} gene sets with {self.iterations} shuffles "
            f"(Q={self.randomization_strength})"
        )
        if self.n_jobs > 1 and self.iterations > 1:
            counts = self._count_meets_parallel()
        else:
            counts = self.count_meets(self.iterations, self.seed)

        for pattern in PatternType:
            for name, pvalues in counts.gene_pvalues(pattern).items():
                write_member_pvalues(self.out_dir, name, pattern, pvalues)

        mutex_p = counts.group_pvalues(PatternType.MUTEX)
        cooc_p = counts.group_pvalues(PatternType.COOC)
        rows = []
        for name, gene_set in self.gene_sets.items():
            row = {"ID": name, "Genes size": gene_set.size}
            row.update(described[name])
            row[self.pvalue_columns[PatternType.MUTEX]] = mutex_p[name]
            row[self.pvalue_columns[PatternType.COOC]] = cooc_p[name]
            rows.append(row)

        columns = (
            ["ID", "Genes size"]
            + self.described_column_names
            + [self.pvalue_columns[PatternType.MUTEX], self.pvalue_columns[PatternType.COOC]]
        )
        results = pd.DataFrame(rows, columns=columns)
        results = results.sort_values(
            self.pvalue_columns[PatternType.MUTEX], kind="stable"
        ).reset_index(drop=True)

        write_result_table(results, self.out_dir / RESULTS_FILENAME)
        return results
