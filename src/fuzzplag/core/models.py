"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for archive fingerprinting and pairwise similarity detection.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Pattern, Union, Callable
from enum import Enum


DEFAULT_AUTHOR_PREFIX_LENGTH = 9


# =============================
# Enums
# =============================

class EntryKind(Enum):
    """Coarse content type of an archive entry, sniffed from its bytes."""
    CONTAINER = "container"
    UNSUPPORTED = "unsupported"
    OTHER = "other"

    def __repr__(self) -> str:
        return self.value


class Category(Enum):
    """Comparison category of a fingerprint; selects the distance threshold."""
    TEXT = "text"
    BINARY = "binary"

    @property
    def display_name(self) -> str:
        mapping = {
            Category.TEXT: "Text",
            Category.BINARY: "Binary",
        }
        return mapping.get(self, self.value)


class FilterMode(Enum):
    """
    Path filter policy.
    ACCEPT_IGNORE keeps paths matching an accept pattern and no ignore pattern.
    TEXT_BINARY keeps paths matching a text or binary pattern and no ignore pattern.
    """
    ACCEPT_IGNORE = "accept-ignore"
    TEXT_BINARY = "text-binary"


class DistanceMetric(Enum):
    """How two TLSH digests are compared."""
    TLSH = "tlsh"
    HAMMING = "hamming"

    @property
    def description(self) -> str:
        mapping = {
            DistanceMetric.TLSH: "TLSH difference score (header + body)",
            DistanceMetric.HAMMING: "Character Hamming distance between hex digests",
        }
        return mapping.get(self, self.value)


class Stage(str, Enum):
    HASH = "Hashing"
    FILTER = "Filtering"
    COMPARE = "Comparing"
    SORT = "Sorting"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class Fingerprint:
    """
    Fuzzy fingerprint of one leaf entry.
    `path` is the logical path rebuilt during descent (e.g. "outer.zip:inner.zip/file.txt"),
    never a filesystem path.
    """
    path: str
    digest: str
    size: int = 0
    content_hash: Optional[str] = None  # xxh64 hex of the entry bytes
    category: Category = Category.TEXT

    def author(self, prefix_length: int = DEFAULT_AUTHOR_PREFIX_LENGTH) -> str:
        """Same-author key: the first `prefix_length` characters of the path."""
        return self.path[:prefix_length]

    def __repr__(self):
        return f"<Fingerprint path={self.path}, category={self.category.value}>"


@dataclass(frozen=True)
class CandidatePair:
    """A directional match whose distance is within the source category's threshold."""
    source: str
    dest: str
    distance: int

    def as_row(self) -> List[str]:
        return [self.source, self.dest, str(self.distance)]


@dataclass
class Thresholds:
    """Inclusive distance cut-offs per category. Binary falls back to text."""
    text: int
    binary: Optional[int] = None

    def __post_init__(self):
        if self.binary is None:
            self.binary = self.text
        if self.text < 0 or self.binary < 0:
            raise ValueError("Distance thresholds cannot be negative")

    def for_category(self, category: Category) -> int:
        return self.binary if category == Category.BINARY else self.text


@dataclass
class DetectionStats:
    """
    Statistics collected during a detection run.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}
        self._listeners: List[Callable[[str, Dict], None]] = []

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when stats are updated."""
        self._listeners.append(listener)

    def update_stage(
            self,
            stage_name: str,
            items_in: int,
            items_out: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "in": 0,
                "out": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["in"] += items_in
        self.stage_stats[stage_name]["out"] += items_out
        self.stage_stats[stage_name]["time"] += duration

        for listener in self._listeners:
            listener(stage_name, self.stage_stats[stage_name])

    def print_summary(self) -> str:
        lines = [
            "Detection Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: IN / OUT / TIME"
        ]

        for stage, data in self.stage_stats.items():
            lines.append(f"{stage}: {data['in']} / {data['out']} / {data['time']:.3f}s")

        return "\n".join(lines)


"""
DTO for detection parameters with built-in validation.
Built from the YAML config (and CLI overrides) by fuzzplag.config.
"""

@dataclass
class DetectionParams:
    """Parameters for one detection run with validation."""
    input_path: str
    thresholds: Thresholds
    min_size_bytes: int = 256
    parallel: int = 4
    max_depth: int = 16
    author_prefix_length: int = DEFAULT_AUTHOR_PREFIX_LENGTH
    fingerprint_top_level_leaves: bool = False
    filter_mode: FilterMode = FilterMode.ACCEPT_IGNORE
    accept_patterns: List[Pattern] = field(default_factory=list)
    ignore_patterns: List[Pattern] = field(default_factory=list)
    text_patterns: List[Pattern] = field(default_factory=list)
    binary_patterns: List[Pattern] = field(default_factory=list)
    distance_metric: DistanceMetric = DistanceMetric.TLSH

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.input_path:
            raise ValueError("Input archive path cannot be empty")

        if self.min_size_bytes < 0:
            raise ValueError("Small-file threshold cannot be negative")

        if self.parallel < 1:
            raise ValueError("Parallel worker count must be at least 1")

        if self.max_depth < 1:
            raise ValueError("Maximum nesting depth must be at least 1")

        if self.author_prefix_length < 1:
            raise ValueError("Author prefix length must be at least 1")
