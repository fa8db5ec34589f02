"""
Alteration pattern selector.

Several operations work on either side of a test: mutual exclusivity
(coverage larger than chance) or co-occurrence (coverage smaller than
chance). PatternType names the side and knows which result column and
per-gene file suffix belong to it.

Examples:
    >>> from mutexfinder.core.pattern import PatternType
    >>> PatternType.get("mutual-exclusivity")
    <PatternType.MUTEX: 'mutex'>
    >>> PatternType.COOC.file_suffix
    '-cooc.txt'
"""

from __future__ import annotations

from enum import Enum

__all__ = ['PatternType']


class PatternType(Enum):
    """
    Side of the exclusivity test.

    Attributes:
        MUTEX: Mutual exclusivity
        COOC: Co-occurrence
    """

    MUTEX = "mutex"
    COOC = "cooc"

    @classmethod
    def get(cls, tag: str) -> PatternType:
        """
        Parse a user-supplied pattern name.

        Raises:
            ValueError: If the tag is not a known pattern name
        """
        aliases = {
            "mutex": cls.MUTEX,
            "mutual-exclusivity": cls.MUTEX,
            "cooc": cls.COOC,
            "co-occurrence": cls.COOC,
        }
        try:
            return aliases[tag.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown pattern type: {tag}. Possible values: "
                f"{cls.MUTEX.value}, {cls.COOC.value}"
            ) from None

    @property
    def pvalue_column(self) -> str:
        """Column of the single-matrix result table holding this p-value."""
        return "Mutex p-value" if self is PatternType.MUTEX else "Cooc p-value"

    @property
    def file_suffix(self) -> str:
        """Suffix of the per-gene p-value files for this pattern."""
        return f"-{self.value}.txt"
