"""
Gene set loading and cleanup.

Gene sets come from a file (``name\\tGENE1 GENE2 ...`` per line), from a
ranked gene list (cumulative rank tiers) or from a pathway catalog. Every
source goes through the same cleanup against the matrix's gene universe:

1. members absent from the universe are removed
2. sets left with fewer than two members are dropped
3. a set whose members equal an already admitted set is dropped

Admission follows input order, so the first of two identical sets wins.

Examples:
    >>> from mutexfinder.io.gene_sets import GeneSetLoader
    >>> loader = GeneSetLoader(matrix.genes)
    >>> gene_sets = loader.load_file(Path("sets.txt"))
    >>> gene_sets["PI3K"].genes
    frozenset({'PIK3CA', 'PTEN'})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from mutexfinder.io.sources import PathwayCatalog, RankedGeneList

__all__ = ['GeneSet', 'GeneSetLoader', 'GeneSetFormatError', 'read_gene_set_file']

logger = logging.getLogger(__name__)


class GeneSetFormatError(ValueError):
    """Raised when a gene set file cannot be parsed."""

    def __init__(self, path: Path, line_no: int, message: str, line: str = ""):
        self.path = path
        self.line_no = line_no
        self.line = line
        if len(line) > 60:
            line = line[:57] + "..."
        super().__init__(f"{path}:{line_no}: {message}: {line!r}")


@dataclass(frozen=True)
class GeneSet:
    """
    Named, duplicate-free collection of genes.

    Attributes:
        name: Identifier used in result tables and per-gene file names
        genes: Member genes
    """

    name: str
    genes: frozenset[str]

    @property
    def size(self) -> int:
        return len(self.genes)

    def sorted_genes(self) -> list[str]:
        return sorted(self.genes)


def read_gene_set_file(path: Path) -> dict[str, set[str]]:
    """
    Parse a gene set file without any cleanup.

    Raises:
        FileNotFoundError: If path does not exist
        GeneSetFormatError: If a line lacks the tab separator or repeats a name
    """
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Gene set file not found: {path}")

    sets: dict[str, set[str]] = {}
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            if "\t" not in line:
                raise GeneSetFormatError(path, line_no, "expected 'name<TAB>genes'", line)
            name, genes = line.split("\t", 1)
            if name in sets:
                raise GeneSetFormatError(path, line_no, f"duplicate gene set name '{name}'", line)
            sets[name] = set(genes.split())
    return sets


class GeneSetLoader:
    """
    Loads gene sets restricted to the genes of an alteration matrix.

    Attributes:
        universe: Genes that may appear in loaded sets
    """

    def __init__(self, universe: Iterable[str]):
        self.universe = frozenset(universe)

    def clean(self, raw_sets: Mapping[str, Iterable[str]]) -> dict[str, GeneSet]:
        """
        Restrict sets to the universe and drop small or redundant ones.

        Args:
            raw_sets: Gene set name -> members, in priority order

        Returns:
            Gene set name -> GeneSet, preserving input order
        """
        cleaned: dict[str, GeneSet] = {}
        seen: set[frozenset[str]] = set()
        n_small = n_redundant = 0
        for name, members in raw_sets.items():
            genes = frozenset(members) & self.universe
            if len(genes) < 2:
                n_small += 1
                continue
            if genes in seen:
                n_redundant += 1
                continue
            seen.add(genes)
            cleaned[name] = GeneSet(name=name, genes=genes)

        logger.info(
            f"Kept {len(cleaned)} of {len(raw_sets)} gene sets "
            f"({n_small} with < 2 genes in matrix, {n_redundant} redundant)"
        )
        return cleaned

    def load_file(self, path: Path) -> dict[str, GeneSet]:
        """Load gene sets from a ``name\\tGENE1 GENE2 ...`` file."""
        return self.clean(read_gene_set_file(path))

    def load_ranked(
        self,
        ranked: RankedGeneList,
        max_rank: int = 6,
        prefix: str = "SFARI",
    ) -> dict[str, GeneSet]:
        """
        Cumulative rank tiers of a ranked gene list.

        The first set holds rank 1 genes, the second ranks 1 and 2, and so on
        up to ``max_rank``. Sets are named ``<prefix>-1-to-<k>``.
        """
        raw = {
            f"{prefix}-1-to-{rank}": ranked.genes_with_max_score(rank)
            for rank in range(1, max_rank + 1)
        }
        return self.clean(raw)

    def load_pathways(self, catalog: PathwayCatalog) -> dict[str, GeneSet]:
        """
        Pathway gene sets of a catalog.

        Pathway identifiers are shortened to the part after the last ``/`` so
        they can be used in file names (``http://identifiers.org/reactome/R-HSA-1``
        becomes ``R-HSA-1``).
        """
        pathways = catalog.cropped_pathways(self.universe)
        raw = {
            pid[pid.rfind("/") + 1:]: members
            for pid, members in sorted(pathways.items())
        }
        return self.clean(raw)
