"""
Unified command orchestrator for plagiarism detection.
This is the SINGLE source of truth for the pipeline. The CLI only parses arguments and writes the report.
"""
import logging
import time
from typing import List, Optional, Callable, Tuple

from fuzzplag.core.classifier import FileTypeClassifierImpl
from fuzzplag.core.dispatcher import HashDispatcherImpl
from fuzzplag.core.engine import SimilarityEngineImpl
from fuzzplag.core.filters import build_path_filter
from fuzzplag.core.hasher import algorithm_for
from fuzzplag.core.interfaces import FingerprintAlgorithm, ContentClassifier
from fuzzplag.core.models import (
    CandidatePair, DetectionParams, DetectionStats, Fingerprint, Stage
)
from fuzzplag.core.sorter import Sorter
from fuzzplag.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)


class DetectionCommand:
    """
    Orchestrates the entire detection workflow:
    1. Fingerprint every leaf of the root archive (worker pool)
    2. Sort fingerprints by path
    3. Apply the path filter
    4. Compare all pairs
    5. Sort candidate pairs by source

    Usage:
        params = FuzzPlagConfig.load().to_params()
        command = DetectionCommand()
        pairs, stats = command.execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check
        )
    """

    def __init__(
        self,
        algorithm: Optional[FingerprintAlgorithm] = None,
        classifier: Optional[ContentClassifier] = None
    ):
        self._algorithm = algorithm
        self._classifier = classifier or FileTypeClassifierImpl()
        self._fingerprints: List[Fingerprint] = []

    def execute(
            self,
            params: DetectionParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Tuple[List[CandidatePair], DetectionStats]:
        """
        Execute detection with given parameters.

        Args:
            params: Validated detection parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            Tuple of (pairs sorted by source, statistics)

        Raises:
            ArchiveError: If the root archive cannot be opened
        """
        stats = DetectionStats()
        total_start_time = time.time()
        algorithm = self._algorithm or algorithm_for(params.distance_metric)

        logger.info(
            f"Hashing {params.input_path} with {params.parallel} workers, "
            f"skipping files under {ConvertUtils.bytes_to_human(params.min_size_bytes)}"
        )
        logger.info(f"Distance metric: {params.distance_metric.description}")

        # Step 1: Fingerprint archive contents
        start_time = time.time()
        dispatcher = HashDispatcherImpl(params, algorithm=algorithm, classifier=self._classifier)
        fingerprints = dispatcher.run(stopped_flag=stopped_flag, progress_callback=progress_callback)
        fingerprints = Sorter.sort_fingerprints(fingerprints)
        self._fingerprints = fingerprints
        stats.update_stage(
            Stage.HASH.value, len(fingerprints) + dispatcher.cache_hits, len(fingerprints),
            time.time() - start_time
        )
        logger.info(f"Total files: {len(fingerprints)}")

        # Step 2: Filter by path patterns
        start_time = time.time()
        filtered = build_path_filter(params).apply(fingerprints)
        stats.update_stage(Stage.FILTER.value, len(fingerprints), len(filtered), time.time() - start_time)
        logger.info(f"Total files after filter: {len(filtered)}")

        # Step 3: Compare
        start_time = time.time()
        engine = SimilarityEngineImpl(algorithm, params.thresholds, params.author_prefix_length)
        pairs = engine.find_pairs(filtered, stopped_flag=stopped_flag, progress_callback=progress_callback)
        stats.update_stage(Stage.COMPARE.value, len(filtered), len(pairs), time.time() - start_time)
        logger.info(f"Candidate pairs: {len(pairs)}")

        # Step 4: Order for the report
        start_time = time.time()
        pairs = Sorter.sort_pairs(pairs)
        stats.update_stage(Stage.SORT.value, len(pairs), len(pairs), time.time() - start_time)

        stats.total_time = time.time() - total_start_time
        return pairs, stats

    def get_fingerprints(self) -> List[Fingerprint]:
        """Get fingerprints (sorted by path) from the last execution."""
        return self._fingerprints.copy()  # Return copy to prevent external mutation
