"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sorter.py
Pure ordering logic for fingerprints and candidate pairs with no dependencies outside core.
Python's sort is stable, so ties keep the order in which they were produced.
"""
from typing import List
from fuzzplag.core.models import CandidatePair, Fingerprint


class Sorter:
    """
    Orders pipeline results before comparison and before reporting.
    Both methods return new lists and leave their input untouched.
    """

    @staticmethod
    def sort_fingerprints(fingerprints: List[Fingerprint]) -> List[Fingerprint]:
        """Sorts by logical path so comparison order does not depend on worker scheduling."""
        if not fingerprints:
            return []
        return sorted(fingerprints, key=lambda f: f.path)

    @staticmethod
    def sort_pairs(pairs: List[CandidatePair]) -> List[CandidatePair]:
        """Stable ascending sort by source path (code point order)."""
        if not pairs:
            return []
        return sorted(pairs, key=lambda p: p.source)
