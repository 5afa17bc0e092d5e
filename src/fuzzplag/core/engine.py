"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/engine.py
All-pairs similarity comparison over filtered fingerprints.

Every ordered pair (a, b) of the cross product is visited, so both (a, b) and (b, a)
can be reported. Pairs sharing an author prefix are skipped, which also covers a == b.
The threshold is picked from the category of the source fingerprint and is inclusive.
"""

import logging
from typing import List, Optional, Callable

from fuzzplag.core.errors import FingerprintError
from fuzzplag.core.interfaces import SimilarityEngine, FingerprintAlgorithm
from fuzzplag.core.models import (
    CandidatePair, Fingerprint, Thresholds, Stage, DEFAULT_AUTHOR_PREFIX_LENGTH
)

logger = logging.getLogger(__name__)


class SimilarityEngineImpl(SimilarityEngine):
    """
    O(n²) comparison engine.

    Attributes:
        algorithm: Supplies the distance between two digests
        thresholds: Inclusive cut-off per category
        author_prefix_length: Length of the same-author key taken from each path
    """

    def __init__(
        self,
        algorithm: FingerprintAlgorithm,
        thresholds: Thresholds,
        author_prefix_length: int = DEFAULT_AUTHOR_PREFIX_LENGTH
    ):
        self.algorithm = algorithm
        self.thresholds = thresholds
        self.author_prefix_length = author_prefix_length

    def find_pairs(
        self,
        fingerprints: List[Fingerprint],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidatePair]:
        pairs: List[CandidatePair] = []
        total = len(fingerprints)
        authors = [f.author(self.author_prefix_length) for f in fingerprints]

        for i, a in enumerate(fingerprints):
            if stopped_flag and stopped_flag():
                logger.debug("Comparison interrupted by user")
                return pairs

            threshold = self.thresholds.for_category(a.category)

            for j, b in enumerate(fingerprints):
                if authors[i] == authors[j]:  # Ignore same person
                    continue

                try:
                    distance = self.algorithm.distance(a.digest, b.digest)
                except (FingerprintError, ValueError) as e:
                    logger.warning(f"Error computing distance {a.path} -> {b.path}: {e}")
                    continue

                if distance <= threshold:
                    logger.debug(f"{a.category.display_name} match {a.path} -> {b.path}: {distance}")
                    pairs.append(CandidatePair(source=a.path, dest=b.path, distance=distance))

            if progress_callback:
                progress_callback(Stage.COMPARE.value, i + 1, total)

        return pairs
