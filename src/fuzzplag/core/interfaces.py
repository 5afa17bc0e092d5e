"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the detection pipeline.
These protocols enforce structural typing using Python's `typing.Protocol` so that
fingerprinting, classification and comparison can be swapped out independently.

Key Components:
---------------
- FingerprintAlgorithm: fuzzy hash of raw bytes plus a distance between two digests.
- ContentClassifier: sniffs a byte buffer into container / unsupported / other.
- ArchiveWalker: yields leaf (path, bytes) pairs from a container and its nested containers.
- HashDispatcher: worker pool turning the root archive into a list of fingerprints.
- PathFilter: regex allow-list producing the working set and per-entry category.
- SimilarityEngine: thresholded all-pairs comparison producing candidate pairs.
"""

from typing import Protocol, List, Iterator, Tuple, Optional, Callable
from fuzzplag.core.models import (
    Category,
    CandidatePair,
    EntryKind,
    Fingerprint,
)


# ===== Interfaces =====

class FingerprintAlgorithm(Protocol):
    """
    Interface for similarity-preserving hash functions.

    Small edits to the input must produce a small distance between digests.
    `distance(d, d)` must be 0 for every digest `d`.
    """

    def fingerprint(self, data: bytes) -> str:
        """Computes the digest of `data`. Raises FingerprintError if it cannot."""
        ...

    def distance(self, a: str, b: str) -> int:
        """Non-negative distance between two digests (0 = near-identical)."""
        ...


class ContentClassifier(Protocol):
    """Interface for content sniffing independent of entry names."""
    def classify(self, data: bytes) -> EntryKind: ...


class ArchiveWalker(Protocol):
    """
    Interface for recursive descent into a container archive.

    Methods:
        walk: Yields (logical path, raw bytes) for every leaf entry.
    """
    def walk(self, data: bytes, prefix: str, depth: int = 1) -> Iterator[Tuple[str, bytes]]:
        ...


class HashDispatcher(Protocol):
    """
    Interface for the worker pool fingerprinting the root archive.
    """
    def run(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[Fingerprint]:
        """
        Fingerprint every leaf reachable from the root archive.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            Fingerprints concatenated per worker (no global order).
        """
        ...


class PathFilter(Protocol):
    """
    Interface for pattern-based selection of fingerprints.
    """
    def apply(self, fingerprints: List[Fingerprint]) -> List[Fingerprint]:
        """Returns the kept fingerprints, each tagged with its category."""
        ...

    def categorize(self, path: str) -> Category:
        """Category a path would be compared under."""
        ...


class SimilarityEngine(Protocol):
    """
    Interface for the pairwise comparison stage.
    """
    def find_pairs(
        self,
        fingerprints: List[Fingerprint],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidatePair]:
        """
        Compare every fingerprint against every other one.

        Returns:
            Unsorted candidate pairs within threshold, excluding same-author pairs.
        """
        ...
