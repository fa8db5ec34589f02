"""
Post-processing of mutex test results.

Three tools work on the files written by the testers:

- explore_significance: how many gene sets pass several FDR thresholds when
  only the most altered gene sets are tested. Fewer tests mean a milder
  multiple-testing burden, so restricting to gene sets with many hits can
  increase the number of discoveries.
- filter_to_top_hit: keep the N gene sets with the most hits (coverage +
  overlap), ordered by p-value.
- find_significant_members: scan per-gene p-value files and report the
  members selected at an FDR threshold.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from mutexfinder.core.pattern import PatternType
from mutexfinder.io.writers import read_member_pvalues, read_result_table, write_result_table
from mutexfinder.stats.fdr import select_by_fdr
from mutexfinder.utils.fileio import atomic_write_lines

__all__ = ['explore_significance', 'filter_to_top_hit', 'find_significant_members']

logger = logging.getLogger(__name__)


def _pvalue_column(results: pd.DataFrame, pattern: PatternType) -> str:
    candidates = [
        pattern.pvalue_column,
        f"Differential {pattern.pvalue_column[0].lower()}{pattern.pvalue_column[1:]}",
    ]
    for column in candidates:
        if column in results.columns:
            return column
    raise ValueError(f"Result table has no {pattern.value} p-value column: {list(results.columns)}")


def _hit_counts(results: pd.DataFrame) -> pd.Series:
    """Coverage + overlap of each gene set (test side for paired tables)."""
    for cov, ov in (("Coverage", "Overlap"), ("Coverage Test", "Overlap Test")):
        if cov in results.columns and ov in results.columns:
            return results[cov].astype(int) + results[ov].astype(int)
    raise ValueError(f"Result table has no coverage/overlap columns: {list(results.columns)}")


def explore_significance(
    in_file: Path,
    out_file: Path,
    pattern: PatternType,
    fdrs: Sequence[float],
) -> pd.DataFrame:
    """
    Count FDR-significant gene sets for every hit threshold.

    For each distinct hit count (descending), the gene sets with at least
    that many hits are tested alone and the number selected at each FDR is
    recorded. The last line reports the best count for each FDR.

    Output format::

        Tested size  Hit thr  FDR=0.1  FDR=0.2
        3            12       1        2
        ...

        maximums              1        3

    Returns:
        The threshold table (without the maximums line)
    """
    results = read_result_table(in_file)
    pcol = _pvalue_column(results, pattern)
    pvals = dict(zip(results["ID"], results[pcol].astype(float)))
    hits = dict(zip(results["ID"], _hit_counts(results)))

    rows = []
    for thr in sorted(set(hits.values()), reverse=True):
        subset = {name: p for name, p in pvals.items() if hits[name] >= thr}
        row = {"Tested size": len(subset), "Hit thr": int(thr)}
        for fdr in fdrs:
            row[f"FDR={float(fdr)!r}"] = len(select_by_fdr(subset, fdr))
        rows.append(row)

    fdr_columns = [f"FDR={float(fdr)!r}" for fdr in fdrs]
    table = pd.DataFrame(rows, columns=["Tested size", "Hit thr"] + fdr_columns)

    lines = ["\t".join(table.columns)]
    for row in table.itertuples(index=False):
        lines.append("\t".join(str(int(v)) for v in row))
    maximums = [str(int(table[c].max())) if len(table) else "0" for c in fdr_columns]
    lines.append("")
    lines.append("\t".join(["maximums", ""] + maximums))

    atomic_write_lines(out_file, lines)
    logger.info(f"Wrote significance exploration of {len(pvals)} gene sets to {out_file}")
    return table


def filter_to_top_hit(
    in_file: Path,
    out_file: Path,
    pattern: PatternType,
    top: int,
) -> pd.DataFrame:
    """
    Keep the ``top`` gene sets with the most hits, sorted by p-value.

    Ties in hit count keep the input order.
    """
    if top < 1:
        raise ValueError(f"top must be >= 1, got {top}")
    results = read_result_table(in_file)
    pcol = _pvalue_column(results, pattern)

    ranked = results.assign(_hits=_hit_counts(results))
    ranked = ranked.sort_values("_hits", ascending=False, kind="stable").head(top)
    ranked = ranked.sort_values(pcol, kind="stable").drop(columns="_hits")
    ranked = ranked.reset_index(drop=True)

    write_result_table(ranked, out_file)
    return ranked


def find_significant_members(
    directory: Path,
    out_file: Path,
    suffix: str,
    fdr: float,
) -> dict[str, list[str]]:
    """
    Members selected at ``fdr`` in every per-gene file of a result directory.

    Args:
        directory: Result directory of a test run
        out_file: Output file, one ``set<TAB>[gene1, gene2]`` line per gene
            set with at least one selected member
        suffix: Per-gene file suffix, e.g. ``-mutex.txt``
        fdr: FDR threshold

    Returns:
        Gene set name -> selected members (sets without selections omitted)
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Result directory not found: {directory}")

    selected: dict[str, list[str]] = {}
    for path in sorted(directory.iterdir()):
        if not path.is_file() or not path.name.endswith(suffix):
            continue
        set_name = path.name[: -len(suffix)]
        members = select_by_fdr(read_member_pvalues(path), fdr)
        if members:
            selected[set_name] = members

    atomic_write_lines(
        out_file,
        [f"{name}\t[{', '.join(members)}]" for name, members in selected.items()],
    )
    logger.info(f"{len(selected)} gene sets have members significant at FDR {fdr}")
    return selected
