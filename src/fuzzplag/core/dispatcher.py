"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/dispatcher.py
Worker pool fingerprinting every leaf of the root archive.

CONCURRENCY MODEL
-----------------
  • One producer (the calling thread) feeds top-level entries into a bounded queue of size N
  • N worker threads consume the queue; one sentinel per worker closes it
  • Each worker owns its zip handle, its result list and its fingerprint cache (no locks)
  • Nested containers are walked inside the worker that dequeued them
  • Results are concatenated worker 0, worker 1, ... after all workers are joined

Only the root archive failing to open is fatal. Every per-entry failure is logged
and the entry is dropped.
"""

import logging
import queue
import threading
import zipfile
from typing import List, Optional, Callable

from fuzzplag.core.classifier import FileTypeClassifierImpl
from fuzzplag.core.errors import ArchiveError, FingerprintError
from fuzzplag.core.hasher import FingerprinterImpl, algorithm_for
from fuzzplag.core.interfaces import HashDispatcher, FingerprintAlgorithm, ContentClassifier
from fuzzplag.core.models import DetectionParams, EntryKind, Fingerprint, Stage
from fuzzplag.core.walker import ArchiveWalkerImpl, READ_ERRORS

logger = logging.getLogger(__name__)

# Separates a top-level container's name from paths inside it ("alice.zip:src/main.c")
TOP_LEVEL_SEPARATOR = ":"

_CLOSED = object()


class _ProgressCounter:
    """Thread-safe processed-entry counter forwarding to a progress callback."""

    def __init__(self, total: int, callback: Optional[Callable[[str, int, object], None]]):
        self.total = total
        self.callback = callback
        self._processed = 0
        self._lock = threading.Lock()

    def step(self) -> None:
        if not self.callback:
            return
        with self._lock:
            self._processed += 1
            try:
                self.callback(Stage.HASH.value, self._processed, self.total)
            except Exception as e:
                logger.warning(f"Error in progress callback: {e}")


class HashDispatcherImpl(HashDispatcher):
    """
    Fingerprints the root archive with a fixed-size pool of worker threads.

    Attributes:
        params: Validated detection parameters (input path, worker count, thresholds...)
        algorithm: Fuzzy hash used for leaves; derived from params.distance_metric by default
        classifier: Content sniffer; `filetype`-based by default
    """

    def __init__(
        self,
        params: DetectionParams,
        algorithm: Optional[FingerprintAlgorithm] = None,
        classifier: Optional[ContentClassifier] = None
    ):
        self.params = params
        self.algorithm = algorithm or algorithm_for(params.distance_metric)
        self.classifier = classifier or FileTypeClassifierImpl()
        self.walker = ArchiveWalkerImpl(
            self.classifier,
            min_size=params.min_size_bytes,
            max_depth=params.max_depth
        )
        self.cache_hits = 0

    def run(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[Fingerprint]:
        path = self.params.input_path
        worker_count = self.params.parallel

        try:
            with zipfile.ZipFile(path) as archive:
                entries = archive.infolist()
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Error opening zip file {path}: {e}") from e

        logger.info(f"Open zip file: {path} success ({len(entries)} entries)")

        results: List[List[Fingerprint]] = [[] for _ in range(worker_count)]
        fingerprinters = [FingerprinterImpl(self.algorithm) for _ in range(worker_count)]
        # Per-worker open failure on the root archive, checked after the join
        open_errors: List[Optional[Exception]] = [None] * worker_count
        work_queue: "queue.Queue" = queue.Queue(maxsize=worker_count)
        progress = _ProgressCounter(len(entries), progress_callback)

        workers = [
            threading.Thread(
                target=self._worker,
                args=(work_queue, results[i], fingerprinters[i], stopped_flag, progress, open_errors, i),
                name=f"hash-worker-{i}",
                daemon=True
            )
            for i in range(worker_count)
        ]
        for worker in workers:
            worker.start()

        try:
            for info in entries:
                if stopped_flag and stopped_flag():
                    logger.debug("Hashing interrupted by user")
                    break
                work_queue.put(info)
        finally:
            for _ in workers:
                work_queue.put(_CLOSED)
            for worker in workers:
                worker.join()

        for error in open_errors:
            if error is not None:
                raise ArchiveError(f"Error opening zip file {path}: {error}") from error

        self.cache_hits = sum(f.cache_hits for f in fingerprinters)
        logger.debug(f"Fingerprint cache hits: {self.cache_hits}")

        return [fingerprint for bucket in results for fingerprint in bucket]

    def _worker(
        self,
        work_queue: "queue.Queue",
        bucket: List[Fingerprint],
        fingerprinter: FingerprinterImpl,
        stopped_flag: Optional[Callable[[], bool]],
        progress: _ProgressCounter,
        open_errors: List[Optional[Exception]],
        index: int
    ) -> None:
        """
        Drains the queue until its sentinel arrives, appending to `bucket` only.
        A worker that cannot open the root archive still drains the queue so the
        producer never blocks, and leaves its error in `open_errors[index]`.
        """
        try:
            archive = zipfile.ZipFile(self.params.input_path)
        except (OSError, zipfile.BadZipFile) as e:
            logger.error(f"{threading.current_thread().name} cannot open {self.params.input_path}: {e}")
            open_errors[index] = e
            archive = None

        try:
            while True:
                info = work_queue.get()
                if info is _CLOSED:
                    break
                if archive is not None and not (stopped_flag and stopped_flag()):
                    try:
                        bucket.extend(self._process_entry(archive, info, fingerprinter))
                    except Exception:
                        # Entry-level failures never escape the worker
                        logger.exception(f"Unexpected error processing {info.filename}")
                progress.step()
        finally:
            if archive is not None:
                archive.close()

    def _process_entry(
        self,
        archive: zipfile.ZipFile,
        info: zipfile.ZipInfo,
        fingerprinter: FingerprinterImpl
    ) -> List[Fingerprint]:
        """
        Classifies one top-level entry and fingerprints whatever it contributes.
        Args:
            archive: This worker's handle on the root archive
            info: Top-level entry to process
            fingerprinter: This worker's fingerprinter
        Returns:
            Fingerprints found under the entry (possibly empty)
        """
        if info.is_dir():
            return []

        name = info.filename
        try:
            data = archive.read(info)
        except READ_ERRORS as e:
            logger.warning(f"Error opening file {name}: {e}")
            return []

        kind = self.classifier.classify(data)

        if kind == EntryKind.UNSUPPORTED:
            logger.warning(f"File type not supported: {name}")
            return []

        if kind == EntryKind.CONTAINER:
            logger.debug(f"Recurring into {name}")
            found = []
            for leaf_path, leaf_data in self.walker.walk(data, name + TOP_LEVEL_SEPARATOR):
                fingerprint = self._fingerprint(fingerprinter, leaf_path, leaf_data)
                if fingerprint is not None:
                    found.append(fingerprint)
            return found

        if not self.params.fingerprint_top_level_leaves:
            logger.debug(f"Top-level leaf {name} not fingerprinted")
            return []

        if len(data) < self.params.min_size_bytes:
            return []

        fingerprint = self._fingerprint(fingerprinter, name, data)
        return [fingerprint] if fingerprint is not None else []

    @staticmethod
    def _fingerprint(fingerprinter: FingerprinterImpl, path: str, data: bytes) -> Optional[Fingerprint]:
        try:
            return fingerprinter.fingerprint(path, data)
        except FingerprintError as e:
            logger.warning(f"Error hashing in-memory file {path}: {e}")
            return None
