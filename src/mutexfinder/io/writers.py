"""
Writers (and matching readers) for matrices and test results.

Output Files:
    - Alteration matrix: same tab-separated format ``load_matrix`` reads,
      cells written as ``1``/``0``
    - ``results.txt``: one row per gene set, sorted by the mutex p-value
    - ``<set>-mutex.txt`` / ``<set>-cooc.txt``: ``gene\\tp-value`` per member,
      sorted by p-value

All files are UTF-8 with LF line endings and are written atomically. A
failed write raises OSError naming the file; result files written before the
failure stay on disk.

Examples:
    >>> from mutexfinder.io.writers import write_matrix
    >>> write_matrix(matrix, Path("matrix.txt"))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

import pandas as pd

from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.core.pattern import PatternType
from mutexfinder.io.loaders import DELIM
from mutexfinder.utils.fileio import atomic_write_lines, atomic_write_text

__all__ = [
    'write_matrix',
    'write_result_table',
    'read_result_table',
    'write_member_pvalues',
    'read_member_pvalues',
    'member_pvalue_path',
    'RESULTS_FILENAME',
]

logger = logging.getLogger(__name__)

RESULTS_FILENAME = "results.txt"


def _ensure_parent(path: Path) -> Path:
    if not isinstance(path, Path):
        path = Path(path)
    if path.parent != Path('.') and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write_matrix(matrix: AlterationMatrix, path: Path) -> None:
    """
    Write an alteration matrix as a tab-separated file.

    The header line starts with an empty field followed by sample names;
    every following line holds a gene and its ``1``/``0`` cells.

    Raises:
        TypeError: If matrix is not an AlterationMatrix
        OSError: If the file cannot be written
    """
    if not isinstance(matrix, AlterationMatrix):
        raise TypeError(f"matrix must be AlterationMatrix, got {type(matrix)}")
    path = _ensure_parent(path)

    lines = [DELIM + DELIM.join(map(str, matrix.samples))]
    data = matrix.data
    for i, gene in enumerate(matrix.genes):
        cells = DELIM.join("1" if v else "0" for v in data[i])
        lines.append(f"{gene}{DELIM}{cells}")

    try:
        atomic_write_lines(path, lines)
    except OSError as e:
        raise OSError(f"Failed to write matrix file {path}: {e}") from e
    logger.info(f"Wrote {matrix} to {path}")


def write_result_table(results: pd.DataFrame, path: Path) -> None:
    """
    Write a gene set result table (tab-separated, header, no index).

    Raises:
        OSError: If the file cannot be written
    """
    path = _ensure_parent(path)
    try:
        atomic_write_text(path, results.to_csv(sep=DELIM, index=False, lineterminator="\n"))
    except OSError as e:
        raise OSError(f"Failed to write results file {path}: {e}") from e
    logger.info(f"Wrote {len(results)} gene set results to {path}")


def read_result_table(path: Path) -> pd.DataFrame:
    """
    Read a result table written by ``write_result_table``.

    The ``ID`` column is always read as text.
    """
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Result file not found: {path}")
    return pd.read_csv(path, sep=DELIM, dtype={"ID": str, "Name": str}, keep_default_na=False)


def member_pvalue_path(out_dir: Path, set_name: str, pattern: PatternType) -> Path:
    """Location of the per-gene p-value file of a gene set."""
    return Path(out_dir) / f"{set_name}{pattern.file_suffix}"


def write_member_pvalues(
    out_dir: Path,
    set_name: str,
    pattern: PatternType,
    pvalues: Mapping[str, float],
) -> Path:
    """
    Write per-gene p-values of one gene set, sorted ascending.

    Ties keep gene name order.

    Returns:
        Path of the written file

    Raises:
        OSError: If the file cannot be written
    """
    path = member_pvalue_path(out_dir, set_name, pattern)
    ordered = sorted(sorted(pvalues), key=lambda gene: pvalues[gene])
    lines = [f"{gene}{DELIM}{float(pvalues[gene])!r}" for gene in ordered]
    try:
        atomic_write_lines(path, lines)
    except OSError as e:
        raise OSError(f"Failed to write member p-value file {path}: {e}") from e
    return path


def read_member_pvalues(path: Path) -> dict[str, float]:
    """
    Read a per-gene p-value file, preserving its order.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If a line is not ``gene<TAB>p-value``
    """
    if not isinstance(path, Path):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Member p-value file not found: {path}")

    pvalues: dict[str, float] = {}
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line:
                continue
            fields = line.split(DELIM)
            if len(fields) != 2:
                raise ValueError(f"{path}:{line_no}: expected 'gene<TAB>p-value'")
            try:
                pvalues[fields[0]] = float(fields[1])
            except ValueError as e:
                raise ValueError(f"{path}:{line_no}: invalid p-value '{fields[1]}'") from e
    return pvalues
