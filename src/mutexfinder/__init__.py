"""
MutexFinder - Mutual exclusivity testing of gene sets

Tests whether the genes of a set are altered in mutually exclusive or
co-occurring samples, against a null distribution of degree-preserving
shuffles of the alteration matrix. Designed for de novo mutation cohorts.
"""

__version__ = "0.1.0"

from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.core.pattern import PatternType
from mutexfinder.core.shuffler import Shuffler

__all__ = [
    "AlterationMatrix",
    "PatternType",
    "Shuffler",
]
