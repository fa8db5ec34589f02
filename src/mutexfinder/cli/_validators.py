"""Shared argparse type validators for CLI parameter bounds checking.

These validators produce clear error messages when users pass invalid
values (e.g., ``--fdr 2.0``, ``--iterations -5``).  They are intended to be
used as the ``type=`` argument in ``add_argument()``.
"""

from __future__ import annotations

import argparse

from mutexfinder.core.pattern import PatternType


def _positive_int(value: str) -> int:
    """argparse type for positive integers (> 0)."""
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return ivalue


def _non_negative_int(value: str) -> int:
    """argparse type for integers >= 0 (random seeds)."""
    ivalue = int(value)
    if ivalue < 0:
        raise argparse.ArgumentTypeError(f"{value} is not a non-negative integer")
    return ivalue


def _fdr(value: str) -> float:
    """argparse type for FDR thresholds in the half-open interval (0, 1]."""
    fvalue = float(value)
    if not (0 < fvalue <= 1):
        raise argparse.ArgumentTypeError(
            f"{value} is not a valid FDR (must be in (0, 1])"
        )
    return fvalue


def _pattern(value: str) -> PatternType:
    """argparse type for pattern names (mutex, cooc and their long forms)."""
    try:
        return PatternType.get(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None
