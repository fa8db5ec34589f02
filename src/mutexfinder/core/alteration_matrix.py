"""
Binary alteration matrix with a bipartite edge view.

AlterationMatrix holds which genes are altered (mutated) in which samples of a
cohort. It is the data the mutual exclusivity tests shuffle and measure.

Biological Context:
    An alteration matrix is a gene × sample table of booleans:
    - Rows = genes
    - Columns = samples (patients, probands, cell lines)
    - True = the gene carries an event (e.g. a de novo mutation) in the sample

    The same data is a bipartite graph: one edge per true cell, connecting a
    gene to a sample. Gene degree is the mutation count of the gene, sample
    degree is the mutation burden of the sample.

Engineering Design:
    - Two views of one object: a dense boolean array (row view) and an
      EdgeList of (gene index, sample index) pairs (edge view)
    - The edge view is built lazily and then only mutated by the Shuffler,
      through the private ``_rewire`` path, so both views stay in
      lock-step
    - Rows handed out to callers are read-only numpy views
    - copy() is always deep; the edge memo of the original is never shared

Examples:
    >>> import numpy as np
    >>> import pandas as pd
    >>> from mutexfinder.core.alteration_matrix import AlterationMatrix
    >>>
    >>> matrix = AlterationMatrix(
    ...     data=np.array([[1, 1, 0, 0], [0, 0, 1, 1]], dtype=bool),
    ...     genes=pd.Index(["A", "B"]),
    ...     samples=pd.Index(["s1", "s2", "s3", "s4"]),
    ... )
    >>> matrix.count_coverage({"A", "B"})
    4
    >>> matrix.count_overlap({"A", "B"})
    0
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd
from numpy.typing import NDArray

__all__ = ['AlterationMatrix', 'EdgeList']


@dataclass
class EdgeList:
    """
    Bipartite graph representation of an alteration matrix.

    Edge ``k`` connects gene row ``gene_index[k]`` to sample column
    ``sample_index[k]``. The order of edges carries no meaning but stays fixed
    while the matrix is being shuffled; only ``sample_index`` entries move.

    Attributes:
        gene_index: Row index of the gene of each edge (int64)
        sample_index: Column index of the sample of each edge (int64)
    """

    gene_index: NDArray[np.int64]
    sample_index: NDArray[np.int64]

    def __len__(self) -> int:
        return len(self.gene_index)

    def copy(self) -> EdgeList:
        return EdgeList(self.gene_index.copy(), self.sample_index.copy())


class AlterationMatrix:
    """
    Gene × sample boolean alteration matrix.

    Attributes:
        data: Read-only boolean array (genes × samples)
        genes: Row identifiers (gene symbols)
        samples: Column identifiers (sample names)
        edges: Memoized edge view, shuffled in place by the Shuffler

    Shape Invariants:
        - data.shape == (len(genes), len(samples))
        - genes are unique
        - data[g, s] is True exactly when (g, s) is an edge
    """

    def __init__(
        self,
        data: np.ndarray,
        genes: pd.Index,
        samples: pd.Index,
    ):
        """
        Initialize AlterationMatrix with validation.

        Args:
            data: Boolean (or 0/1) matrix (genes × samples). It is copied.
            genes: Gene identifiers, one per row, unique
            samples: Sample names, one per column

        Raises:
            TypeError: If argument types are wrong
            ValueError: If shapes are inconsistent or genes are duplicated
        """
        if not isinstance(data, np.ndarray):
            raise TypeError(f"data must be np.ndarray, got {type(data)}")
        if not isinstance(genes, pd.Index):
            raise TypeError(f"genes must be pd.Index, got {type(genes)}")
        if not isinstance(samples, pd.Index):
            raise TypeError(f"samples must be pd.Index, got {type(samples)}")

        if data.ndim != 2:
            raise ValueError(f"data must be 2D, got shape {data.shape}")

        n_genes, n_samples = data.shape
        if len(genes) != n_genes:
            raise ValueError(
                f"genes length ({len(genes)}) must match data rows ({n_genes})"
            )
        if len(samples) != n_samples:
            raise ValueError(
                f"samples length ({len(samples)}) must match data columns ({n_samples})"
            )
        if not genes.is_unique:
            duplicated = list(genes[genes.duplicated()].unique()[:5])
            raise ValueError(f"genes must be unique, duplicated: {duplicated}")

        self._data = np.array(data, dtype=bool, copy=True)
        self._genes = genes
        self._samples = samples
        self._row_of = {gene: i for i, gene in enumerate(genes)}
        self._edges: EdgeList | None = None

    @classmethod
    def from_rows(
        cls,
        rows: Mapping[str, Iterable[bool]],
        samples: Iterable[str],
    ) -> AlterationMatrix:
        """
        Build a matrix from a ``gene -> row`` mapping.

        Rows keep the mapping's iteration order.

        Examples:
            >>> m = AlterationMatrix.from_rows(
            ...     {"A": [1, 1, 0, 0], "B": [0, 0, 1, 1]}, ["s1", "s2", "s3", "s4"]
            ... )
            >>> m.n_edges
            4
        """
        samples = pd.Index(list(samples))
        if rows:
            data = np.array([list(row) for row in rows.values()], dtype=bool)
        else:
            data = np.zeros((0, len(samples)), dtype=bool)
        return cls(data=data, genes=pd.Index(list(rows.keys())), samples=samples)

    @property
    def data(self) -> NDArray[np.bool_]:
        """Read-only view of the boolean matrix (genes × samples)."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    @property
    def genes(self) -> pd.Index:
        """Gene identifiers in row order."""
        return self._genes

    @property
    def samples(self) -> pd.Index:
        """Sample names in column order."""
        return self._samples

    @property
    def shape(self) -> tuple[int, int]:
        """Matrix dimensions (n_genes, n_samples)."""
        return self._data.shape

    @property
    def n_genes(self) -> int:
        return self._data.shape[0]

    @property
    def n_samples(self) -> int:
        return self._data.shape[1]

    @property
    def n_edges(self) -> int:
        """Number of true cells (edges of the bipartite graph)."""
        return int(np.count_nonzero(self._data))

    def __contains__(self, gene: object) -> bool:
        return gene in self._row_of

    def row_index(self, gene: str) -> int:
        """Row position of ``gene``; raises KeyError when absent."""
        return self._row_of[gene]

    def row(self, gene: str) -> NDArray[np.bool_]:
        """Read-only boolean row of ``gene``."""
        view = self._data[self._row_of[gene]].view()
        view.flags.writeable = False
        return view

    @property
    def rows(self) -> dict[str, NDArray[np.bool_]]:
        """Row view: ``gene -> read-only boolean row``."""
        return {gene: self.row(gene) for gene in self._genes}

    def has_all_genes(self, genes: Collection[str]) -> bool:
        """True when every gene of the collection has a row."""
        return all(gene in self._row_of for gene in genes)

    def _member_rows(self, genes: Iterable[str]) -> list[int]:
        return sorted(self._row_of[g] for g in set(genes) if g in self._row_of)

    def mutation_count(self, gene: str) -> int:
        """Number of samples in which ``gene`` is altered."""
        return int(np.count_nonzero(self._data[self._row_of[gene]]))

    def individual_coverage(self, genes: Iterable[str]) -> dict[str, int]:
        """Mutation count of each gene of the set."""
        return {gene: self.mutation_count(gene) for gene in genes}

    def count_coverage(self, genes: Iterable[str]) -> int:
        """
        Number of samples altered in at least one gene of the set.

        Genes without a row are ignored.
        """
        idx = self._member_rows(genes)
        if not idx:
            return 0
        return int(np.count_nonzero(self._data[idx].any(axis=0)))

    def count_overlap(self, genes: Iterable[str]) -> int:
        """
        Number of extra hits: for each sample, the alterations beyond the
        first one among the set's genes, summed over samples.
        """
        idx = self._member_rows(genes)
        if not idx:
            return 0
        k = self._data[idx].sum(axis=0)
        return int(np.maximum(k - 1, 0).sum())

    def count_pair_overlap(self, gene1: str, gene2: str) -> int:
        """Number of samples altered in both genes."""
        b1 = self._data[self._row_of[gene1]]
        b2 = self._data[self._row_of[gene2]]
        return int(np.count_nonzero(b1 & b2))

    def count_overlap_pairwise(self, genes: Iterable[str]) -> dict[str, dict[str, int]]:
        """
        Overlap of each member with every other member.

        Returns:
            ``gene -> (other gene -> shared altered samples)`` for all ordered
            pairs of distinct genes.
        """
        genes = list(dict.fromkeys(genes))
        return {
            g1: {g2: self.count_pair_overlap(g1, g2) for g2 in genes if g2 != g1}
            for g1 in genes
        }

    def gene_to_indices(self) -> dict[str, set[int]]:
        """
        Altered sample indices of every gene, read from the edge view.

        Genes without alterations map to an empty set.
        """
        edges = self.edges
        mapping: dict[str, set[int]] = {gene: set() for gene in self._genes}
        for g, s in zip(edges.gene_index.tolist(), edges.sample_index.tolist()):
            mapping[self._genes[g]].add(s)
        return mapping

    @property
    def edges(self) -> EdgeList:
        """Edge view, generated on first access and memoized."""
        if self._edges is None:
            self._edges = self.generate_edges()
        return self._edges

    def generate_edges(self) -> EdgeList:
        """
        Build a fresh edge list by traversing rows in index order.

        Within a row, edges follow ascending sample index.
        """
        gene_index, sample_index = np.nonzero(self._data)
        return EdgeList(gene_index.astype(np.int64), sample_index.astype(np.int64))

    def _rewire(self, sample_index: Iterable[int]) -> None:
        """
        Replace the sample endpoint of every edge and rebuild the rows from
        the edge view. Only the Shuffler calls this.

        The new endpoints must keep edges unique; gene endpoints and edge
        order are unchanged.
        """
        edges = self.edges
        edges.sample_index[:] = np.fromiter(sample_index, dtype=np.int64, count=len(edges))
        self._data[:] = False
        self._data[edges.gene_index, edges.sample_index] = True

    def copy(self) -> AlterationMatrix:
        """
        Create an independent deep copy.

        Shuffling the copy never alters this matrix; the copy builds its own
        edge view on demand.
        """
        return AlterationMatrix(
            data=self._data.copy(),
            genes=self._genes.copy(),
            samples=self._samples.copy(),
        )

    def equals(self, other: AlterationMatrix) -> bool:
        """Logical equality: same samples, same gene rows regardless of order."""
        if not isinstance(other, AlterationMatrix):
            return False
        if not self._samples.equals(other.samples):
            return False
        if set(self._genes) != set(other.genes):
            return False
        order = [other.row_index(g) for g in self._genes]
        return bool(np.array_equal(self._data, other._data[order]))

    def __repr__(self) -> str:
        return (
            f"AlterationMatrix({self.n_genes} genes × {self.n_samples} samples, "
            f"{self.n_edges} alterations)"
        )

    def __str__(self) -> str:
        return self.__repr__()
