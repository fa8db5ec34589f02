"""
Readers for alteration matrices.

Two sources are supported:

1. Tab-separated matrix files (the format written by ``write_matrix``)::

       <empty>\tS1\tS2\tS3
       TP53\t1\t0\t1
       KRAS\t0\t\t1

   A cell is altered when it is non-empty and not ``"0"``.

2. Streams of ``(sample, gene)`` event records, such as a de novo mutation
   database. Samples are sorted and deduplicated to fix the column order.

Examples:
    >>> from pathlib import Path
    >>> from mutexfinder.io.loaders import load_matrix, matrix_from_events
    >>>
    >>> matrix = load_matrix(Path("matrix.txt"))
    >>> matrix = matrix_from_events([("p1", "CHD8"), ("p2", "SCN2A")])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import numpy as np
import pandas as pd

from mutexfinder.core.alteration_matrix import AlterationMatrix

__all__ = ['load_matrix', 'matrix_from_events', 'MatrixFormatError', 'DELIM']

logger = logging.getLogger(__name__)

DELIM = "\t"


class MatrixFormatError(ValueError):
    """Raised when a matrix file cannot be parsed."""

    def __init__(self, path: Path, line_no: int, message: str):
        self.path = path
        self.line_no = line_no
        super().__init__(f"{path}:{line_no}: {message}")


def _is_altered(cell: str) -> bool:
    return cell != "" and cell != "0"


def load_matrix(path: Path) -> AlterationMatrix:
    """
    Load an alteration matrix from a tab-separated file.

    Expected format:
    - Line 1: an empty leading field, then one sample name per column
    - Following lines: gene name, then one cell per sample
    - Blank lines are skipped

    Args:
        path: Path to the matrix file (UTF-8)

    Returns:
        AlterationMatrix with rows in file order

    Raises:
        FileNotFoundError: If path does not exist
        MatrixFormatError: If the header is missing, a row has the wrong
            number of cells, or a gene appears twice
    """
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Matrix file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        lines = f.read().split("\n")

    # Tolerate CRLF files written on other platforms
    lines = [line[:-1] if line.endswith("\r") else line for line in lines]

    if not lines or not lines[0].strip():
        raise MatrixFormatError(path, 1, "missing header line with sample names")

    header = lines[0].split(DELIM)
    samples = header[1:]
    if not samples:
        raise MatrixFormatError(path, 1, "header has no sample columns")
    n_samples = len(samples)

    genes: list[str] = []
    rows: list[list[bool]] = []
    seen: set[str] = set()
    for line_no, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        fields = line.split(DELIM)
        gene, cells = fields[0], fields[1:]
        if len(cells) != n_samples:
            raise MatrixFormatError(
                path, line_no,
                f"expected {n_samples} cells for gene '{gene}', found {len(cells)}",
            )
        if gene in seen:
            raise MatrixFormatError(path, line_no, f"duplicate gene '{gene}'")
        seen.add(gene)
        genes.append(gene)
        rows.append([_is_altered(c) for c in cells])

    data = np.array(rows, dtype=bool) if rows else np.zeros((0, n_samples), dtype=bool)
    matrix = AlterationMatrix(data=data, genes=pd.Index(genes), samples=pd.Index(samples))
    logger.info(f"Loaded {matrix} from {path}")
    return matrix


def matrix_from_events(events: Iterable[tuple[str, str]]) -> AlterationMatrix:
    """
    Build an alteration matrix from ``(sample, gene)`` event records.

    Duplicate events collapse into a single alteration. Samples and genes are
    sorted so that equal event multisets give equal matrices.

    Args:
        events: Iterable of (sample name, gene) pairs

    Returns:
        AlterationMatrix with sorted genes and samples
    """
    events_df = pd.DataFrame(list(events), columns=["sample", "gene"])
    if events_df.empty:
        return AlterationMatrix(
            data=np.zeros((0, 0), dtype=bool),
            genes=pd.Index([]),
            samples=pd.Index([]),
        )

    events_df = events_df.astype(str).drop_duplicates()
    samples = pd.Index(sorted(events_df["sample"].unique()))
    genes = pd.Index(sorted(events_df["gene"].unique()))

    data = np.zeros((len(genes), len(samples)), dtype=bool)
    data[genes.get_indexer(events_df["gene"]), samples.get_indexer(events_df["sample"])] = True

    matrix = AlterationMatrix(data=data, genes=genes, samples=samples)
    logger.info(f"Built {matrix} from {len(events_df)} distinct events")
    return matrix
