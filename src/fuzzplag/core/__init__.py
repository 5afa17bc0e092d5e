"""
Core detection engine: archive walker, hash dispatcher, path filter and similarity engine.

This package contains the performance-critical foundation of fuzzplag:
- FileTypeClassifierImpl: magic-byte sniffing of archive entries
- ArchiveWalkerImpl: bounded descent into nested zip containers
- HashDispatcherImpl: worker pool fingerprinting the root archive (TLSH + xxHash cache)
- AcceptIgnoreFilter / TextBinaryFilter: regex allow-lists with text/binary categories
- SimilarityEngineImpl: thresholded all-pairs comparison with same-author exclusion
- Sorter: deterministic ordering of fingerprints and candidate pairs

All components are pure Python with no UI dependencies, suitable for CLI and server usage.
"""

from .classifier import FileTypeClassifierImpl
from .walker import ArchiveWalkerImpl
from .hasher import TlshAlgorithmImpl, HammingTlshAlgorithmImpl, FingerprinterImpl, algorithm_for
from .dispatcher import HashDispatcherImpl
from .filters import AcceptIgnoreFilter, TextBinaryFilter, build_path_filter
from .engine import SimilarityEngineImpl
from .sorter import Sorter
from .errors import FuzzPlagError, ConfigError, ArchiveError, FingerprintError, ReportError
from .models import (
    Fingerprint, CandidatePair, Thresholds, DetectionParams, DetectionStats,
    EntryKind, Category, FilterMode, DistanceMetric)

__all__ = [
    "FileTypeClassifierImpl",
    "ArchiveWalkerImpl",
    "TlshAlgorithmImpl",
    "HammingTlshAlgorithmImpl",
    "FingerprinterImpl",
    "algorithm_for",
    "HashDispatcherImpl",
    "AcceptIgnoreFilter",
    "TextBinaryFilter",
    "build_path_filter",
    "SimilarityEngineImpl",
    "Sorter",
    "FuzzPlagError",
    "ConfigError",
    "ArchiveError",
    "FingerprintError",
    "ReportError",
    "Fingerprint",
    "CandidatePair",
    "Thresholds",
    "DetectionParams",
    "DetectionStats",
    "EntryKind",
    "Category",
    "FilterMode",
    "DistanceMetric",
]
