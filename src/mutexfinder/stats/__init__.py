"""
Statistical testing of mutual exclusivity and co-occurrence.

Exports:
- MutexTester: single-matrix permutation test
- DifferentialMutexTester: paired test vs control permutation test
- set statistics (sample-hit histograms, participation scores)
- FDR selection and result post-processing tools
"""

from .differential import DifferentialMutexTester
from .fdr import adjust_pvalues, select_by_fdr
from .mutex import MeetCounts, MutexTester, RunCancelled
from .significance import explore_significance, filter_to_top_hit, find_significant_members
from .statistics import (
    SetMeasurer,
    SetSnapshot,
    gene_to_sample_indices,
    participation_scores,
    sample_hit_counts,
)

__all__ = [
    "MutexTester",
    "DifferentialMutexTester",
    "MeetCounts",
    "RunCancelled",
    "SetMeasurer",
    "SetSnapshot",
    "sample_hit_counts",
    "gene_to_sample_indices",
    "participation_scores",
    "adjust_pvalues",
    "select_by_fdr",
    "explore_significance",
    "filter_to_top_hit",
    "find_significant_members",
]
