"""
Pytest configuration and shared fixtures.

Matrices here come in two kinds:

- the literal tiny matrices (exclusive and co-occurring pairs on four
  samples); their degree sequences pin the coverage of {A, B}, so every
  shuffle reproduces the observed statistics
- embedded variants on 100 samples where every sample carries two
  alterations and background genes leave room for the edge swaps to mix
"""

import numpy as np
import pandas as pd
import pytest

from mutexfinder.core.alteration_matrix import AlterationMatrix


def _span(start: int, stop: int, n_samples: int = 100) -> list[int]:
    row = [0] * n_samples
    for s in range(start, stop):
        row[s] = 1
    return row


def _union(*rows: list[int]) -> list[int]:
    return [int(any(cells)) for cells in zip(*rows)]


def sample_names(n: int) -> list[str]:
    return [f"S{i:03d}" for i in range(n)]


def generate_random_matrix(
    n_genes: int,
    n_samples: int,
    density: float = 0.2,
    seed: int = 42,
) -> AlterationMatrix:
    """
    Random alteration matrix with independent cells.

    Args:
        n_genes: Number of genes (rows)
        n_samples: Number of samples (columns)
        density: Probability that a cell is altered
        seed: Random seed for reproducibility
    """
    rng = np.random.default_rng(seed)
    data = rng.random((n_genes, n_samples)) < density
    return AlterationMatrix(
        data=data,
        genes=pd.Index([f"G{i}" for i in range(n_genes)]),
        samples=pd.Index(sample_names(n_samples)),
    )


@pytest.fixture
def exclusive_matrix():
    """A=[1,1,0,0], B=[0,0,1,1]: coverage 4, overlap 0."""
    return AlterationMatrix.from_rows(
        {"A": [1, 1, 0, 0], "B": [0, 0, 1, 1]}, ["s1", "s2", "s3", "s4"]
    )


@pytest.fixture
def cooc_matrix():
    """A=[1,1,0,0], B=[1,1,0,0]: coverage 2, overlap 2."""
    return AlterationMatrix.from_rows(
        {"A": [1, 1, 0, 0], "B": [1, 1, 0, 0]}, ["s1", "s2", "s3", "s4"]
    )


@pytest.fixture
def embedded_exclusive_matrix():
    """
    A and B (40 hits each) never share a sample; 100 samples of degree 2.

    Under shuffling A and B are expected to share about ten samples.
    """
    return AlterationMatrix.from_rows(
        {
            "A": _span(0, 40),
            "B": _span(40, 80),
            "C": _span(0, 80),
            "D": _span(80, 100),
            "E": _span(80, 100),
        },
        sample_names(100),
    )


@pytest.fixture
def embedded_cooc_matrix():
    """A and B (40 hits each) share all their samples; 100 samples of degree 2."""
    return AlterationMatrix.from_rows(
        {
            "A": _span(0, 40),
            "B": _span(0, 40),
            "C": _span(40, 100),
            "D": _span(40, 100),
        },
        sample_names(100),
    )


@pytest.fixture
def independent_matrix():
    """
    A and B (20 hits each) share two samples, about what chance gives when
    every sample carries two alterations.
    """
    return AlterationMatrix.from_rows(
        {
            "A": _span(0, 20),
            "B": _span(18, 38),
            "C": _union(_span(0, 18), _span(20, 38)),
            "D": _span(38, 100),
            "E": _span(38, 100),
        },
        sample_names(100),
    )


@pytest.fixture
def random_matrix():
    """15 genes × 25 samples with 30% altered cells."""
    return generate_random_matrix(15, 25, density=0.3, seed=7)


@pytest.fixture
def make_random_matrix():
    """Factory for seeded random matrices."""
    return generate_random_matrix


@pytest.fixture
def gene_set_file(tmp_path):
    """Gene set file with a redundant set, a small set and an unknown gene."""
    path = tmp_path / "sets.txt"
    path.write_text(
        "PAIR\tA B\n"
        "SAME_PAIR\tB A\n"
        "SINGLE\tA\n"
        "WITH_UNKNOWN\tA C ZZZ\n"
    )
    return path
