"""
Core data structures for mutual exclusivity testing.

1. AlterationMatrix: binary gene × sample matrix with row and edge views
2. Shuffler: degree-preserving edge-swap randomizer, the only mutator of a matrix
3. PatternType: mutual exclusivity vs co-occurrence selector

Examples:
    >>> from mutexfinder.core import AlterationMatrix, Shuffler
    >>>
    >>> matrix = AlterationMatrix.from_rows({"A": [1, 0], "B": [0, 1]}, ["s1", "s2"])
    >>> Shuffler(matrix.copy(), seed=1).shuffle()
"""

from mutexfinder.core.alteration_matrix import AlterationMatrix, EdgeList
from mutexfinder.core.pattern import PatternType
from mutexfinder.core.shuffler import DEFAULT_RANDOMIZATION_STRENGTH, Shuffler

__all__ = [
    'AlterationMatrix',
    'EdgeList',
    'PatternType',
    'Shuffler',
    'DEFAULT_RANDOMIZATION_STRENGTH',
]
