"""
Benjamini–Hochberg selection of significant results.

Used by the post-processing tools only; the testers themselves report raw
empirical p-values.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

__all__ = ['adjust_pvalues', 'select_by_fdr']


def adjust_pvalues(pvalues: Mapping[str, float]) -> dict[str, float]:
    """
    Benjamini–Hochberg adjusted p-values (q-values).

    Args:
        pvalues: name -> p-value in [0, 1]

    Returns:
        name -> q-value, same keys
    """
    from scipy.stats import false_discovery_control

    if not pvalues:
        return {}
    names = list(pvalues)
    p = np.array([pvalues[n] for n in names], dtype=float)
    q = false_discovery_control(p, method='bh')
    return dict(zip(names, q.tolist()))


def select_by_fdr(pvalues: Mapping[str, float], fdr: float) -> list[str]:
    """
    Names selected at the given false discovery rate.

    Args:
        pvalues: name -> p-value
        fdr: FDR threshold in (0, 1]

    Returns:
        Selected names ordered by ascending p-value (ties by name)

    Raises:
        ValueError: If fdr is outside (0, 1]

    Examples:
        >>> select_by_fdr({"a": 0.001, "b": 0.02, "c": 0.5}, 0.05)
        ['a', 'b']
    """
    if not (0 < fdr <= 1):
        raise ValueError(f"fdr must be in (0, 1], got {fdr}")
    qvalues = adjust_pvalues(pvalues)
    selected = [name for name, q in qvalues.items() if q <= fdr]
    return sorted(selected, key=lambda name: (pvalues[name], name))
