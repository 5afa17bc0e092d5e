"""
FuzzPlag: near-duplicate submission finder for (nested) archives of student work.

Core features:
- Recursive descent into zip archives nested at any depth (bounded)
- Parallel TLSH fingerprinting with a fixed worker pool
- Accept/ignore or text/binary/ignore regex filters on logical paths
- All-pairs comparison with per-category thresholds and same-author exclusion
- CSV or plain-text report ordered by source path
"""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("fuzzplag")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from fuzzplag.commands import DetectionCommand
from fuzzplag.config import FuzzPlagConfig
from fuzzplag.core import (
    DetectionParams, Thresholds, Fingerprint, CandidatePair, Category, FilterMode, DistanceMetric
)
from fuzzplag.services.report_service import ReportService

__all__ = [
    "DetectionCommand",
    "FuzzPlagConfig",
    "DetectionParams",
    "Thresholds",
    "Fingerprint",
    "CandidatePair",
    "Category",
    "FilterMode",
    "DistanceMetric",
    "ReportService",
    "__version__",
]
