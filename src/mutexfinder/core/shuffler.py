"""
Degree-preserving randomization of alteration matrices.

Implements the edge-swap rewiring of Maslov & Sneppen
(https://arxiv.org/abs/cond-mat/0312028) on the bipartite gene–sample graph.
Every gene keeps its mutation count and every sample keeps its mutation
burden, so shuffled matrices form the null model for mutual exclusivity.

One shuffle runs ``Q × E`` trial swaps, where E is the number of edges and Q
the randomization strength (100 by default). A trial picks two edges
uniformly with replacement and exchanges their samples unless that would
create an edge that already exists. The check also rejects pairs that share
a gene or a sample.

Examples:
    >>> from mutexfinder.core.shuffler import Shuffler
    >>> shuffler = Shuffler(matrix, seed=7)
    >>> accepted = shuffler.shuffle()
"""

from __future__ import annotations

import logging

import numpy as np

from mutexfinder.core.alteration_matrix import AlterationMatrix

__all__ = ['Shuffler', 'DEFAULT_RANDOMIZATION_STRENGTH']

logger = logging.getLogger(__name__)

DEFAULT_RANDOMIZATION_STRENGTH = 100


class Shuffler:
    """
    In-place degree-preserving shuffler bound to one matrix.

    The shuffler is the only mutator of its matrix. Nothing may read the
    matrix while ``shuffle()`` runs.

    Attributes:
        matrix: The alteration matrix being randomized
        randomization_strength: Trial swaps per edge in one shuffle (Q)
    """

    def __init__(
        self,
        matrix: AlterationMatrix,
        randomization_strength: int = DEFAULT_RANDOMIZATION_STRENGTH,
        seed: int | np.random.SeedSequence | None = None,
    ):
        """
        Args:
            matrix: Matrix to randomize in place
            randomization_strength: Q, number of trial swaps per edge
            seed: Seed for the random generator. None draws fresh OS entropy.

        Raises:
            ValueError: If randomization_strength < 1
        """
        if randomization_strength < 1:
            raise ValueError(
                f"randomization_strength must be >= 1, got {randomization_strength}"
            )
        self.matrix = matrix
        self.randomization_strength = randomization_strength
        self._rng = np.random.default_rng(seed)

    def shuffle(self) -> int:
        """
        One round of randomization of the matrix.

        Returns:
            Number of accepted swaps
        """
        edges = self.matrix.edges
        n_edges = len(edges)
        if n_edges < 2:
            return 0

        n_samples = self.matrix.n_samples
        genes = edges.gene_index.tolist()
        samples = edges.sample_index.tolist()
        occupied = {g * n_samples + s for g, s in zip(genes, samples)}

        accepted = 0
        for _ in range(self.randomization_strength):
            picks = self._rng.integers(0, n_edges, size=2 * n_edges).tolist()
            for k in range(0, 2 * n_edges, 2):
                i = picks[k]
                j = picks[k + 1]
                if i == j:
                    continue

                g1 = genes[i]
                g2 = genes[j]
                s1 = samples[i]
                s2 = samples[j]

                # Swapping must not create an edge that already exists
                new1 = g1 * n_samples + s2
                new2 = g2 * n_samples + s1
                if new1 in occupied or new2 in occupied:
                    continue

                occupied.remove(g1 * n_samples + s1)
                occupied.remove(g2 * n_samples + s2)
                occupied.add(new1)
                occupied.add(new2)
                samples[i] = s2
                samples[j] = s1
                accepted += 1

        self.matrix._rewire(samples)
        logger.debug(
            f"Shuffle accepted {accepted} of {self.randomization_strength * n_edges} trial swaps"
        )
        return accepted
