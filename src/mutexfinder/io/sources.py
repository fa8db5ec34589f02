"""
Collaborator interfaces for curated gene and event sources.

The testers only need gene sets and a matrix. Where those come from is up to
collaborators described here as Protocols, so that any catalog (Reactome,
MSigDB, a ranked autism gene list, a de novo variant database) can be
plugged in:

- PathwayCatalog: pathway gene sets restricted to a gene universe, plus names
- RankedGeneList: genes with a confidence rank (1 = most confident)
- EventDatabase: a stream of (sample, gene) alteration events

File-backed implementations are provided for the command line:

- PathwayTable:     ``id\\tname\\tGENE1 GENE2 ...``
- RankedGeneTable:  ``gene\\trank``
- EventTable:       tab-separated with ``sample`` and ``gene`` columns and any
                    number of extra columns usable as ``column=value`` filters
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

import pandas as pd

__all__ = [
    'PathwayCatalog',
    'RankedGeneList',
    'EventDatabase',
    'PathwayTable',
    'RankedGeneTable',
    'EventTable',
    'parse_filter',
]

logger = logging.getLogger(__name__)


@runtime_checkable
class PathwayCatalog(Protocol):
    """Catalog of pathway gene sets."""

    def cropped_pathways(self, universe: Iterable[str]) -> dict[str, set[str]]:
        """Pathway id -> member genes, restricted to the universe."""
        ...

    def name(self, pathway_id: str) -> str | None:
        """Human readable name of a pathway, None when unknown."""
        ...


@runtime_checkable
class RankedGeneList(Protocol):
    """Genes ranked by evidence score (1 = strongest)."""

    def genes_with_max_score(self, rank: int) -> set[str]:
        """Genes whose rank is at most ``rank``."""
        ...

    def all_genes(self) -> set[str]:
        ...

    def classification(self, gene: str) -> str | None:
        """Rank label of a gene, None when the gene is not ranked."""
        ...


@runtime_checkable
class EventDatabase(Protocol):
    """Source of (sample, gene) alteration events."""

    def stream(self, event_filter: Mapping[str, str] | None = None) -> Iterator[tuple[str, str]]:
        ...


def _read_table(path: Path, columns: list[str]) -> pd.DataFrame:
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return pd.read_csv(
            path, sep="\t", header=None, names=columns, dtype=str,
            keep_default_na=False, comment="#",
        )
    except pd.errors.ParserError as e:
        raise ValueError(f"Malformed table {path}: {e}") from e


class PathwayTable:
    """
    Pathway catalog read from a three-column TSV file.

    Columns: pathway id, pathway name, space-separated member genes.
    """

    def __init__(self, path: Path):
        df = _read_table(path, ["id", "name", "genes"])
        self._names = dict(zip(df["id"], df["name"]))
        self._members = {
            pid: set(genes.split()) for pid, genes in zip(df["id"], df["genes"])
        }
        logger.info(f"Loaded {len(self._members)} pathways from {path}")

    def cropped_pathways(self, universe: Iterable[str]) -> dict[str, set[str]]:
        universe = set(universe)
        return {pid: members & universe for pid, members in self._members.items()}

    def name(self, pathway_id: str) -> str | None:
        name = self._names.get(pathway_id)
        return name if name else None


class RankedGeneTable:
    """Ranked gene list read from a two-column TSV file (gene, integer rank)."""

    def __init__(self, path: Path):
        df = _read_table(path, ["gene", "rank"])
        try:
            ranks = pd.to_numeric(df["rank"], errors="raise").astype(int)
        except ValueError as e:
            raise ValueError(f"Non-integer rank in {path}: {e}") from e
        self._ranks = dict(zip(df["gene"], ranks))

    def genes_with_max_score(self, rank: int) -> set[str]:
        return {gene for gene, r in self._ranks.items() if r <= rank}

    def all_genes(self) -> set[str]:
        return set(self._ranks)

    def classification(self, gene: str) -> str | None:
        rank = self._ranks.get(gene)
        return None if rank is None else str(rank)


def parse_filter(spec: str | None) -> dict[str, str]:
    """
    Parse ``"col=value,col2=value2"`` into a filter mapping.

    Raises:
        ValueError: If a term lacks ``=``
    """
    if not spec:
        return {}
    result = {}
    for term in spec.split(","):
        if "=" not in term:
            raise ValueError(f"Invalid filter term '{term}', expected column=value")
        key, value = term.split("=", 1)
        result[key.strip()] = value.strip()
    return result


class EventTable:
    """
    Event database backed by a tab-separated file with a header row.

    Required columns are ``sample`` and ``gene``; other columns (study,
    variant class, phenotype, ...) can be used to filter the stream.
    """

    def __init__(self, path: Path):
        if not isinstance(path, Path):
            path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Event file not found: {path}")
        self._df = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False)
        missing = {"sample", "gene"} - set(self._df.columns)
        if missing:
            raise ValueError(f"Event file {path} lacks required columns: {sorted(missing)}")
        logger.info(f"Loaded {len(self._df)} events from {path}")

    def stream(self, event_filter: Mapping[str, str] | None = None) -> Iterator[tuple[str, str]]:
        df = self._df
        for column, value in (event_filter or {}).items():
            if column not in df.columns:
                raise ValueError(f"Unknown filter column '{column}'")
            df = df[df[column] == value]
        yield from zip(df["sample"], df["gene"])
