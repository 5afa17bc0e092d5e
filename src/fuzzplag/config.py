"""
YAML configuration for fuzzplag.

The file is named `config.yaml` and looked up in `./conf` then `.` unless an explicit
path is given. Keys use dashes and mirror the command line where both exist.
"""
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Union

import yaml

from fuzzplag.aliases import DISTANCE_METRIC_ALIASES, DISTANCE_METRIC_CHOICES
from fuzzplag.core.errors import ConfigError
from fuzzplag.core.models import (
    DetectionParams, DistanceMetric, FilterMode, Thresholds, DEFAULT_AUTHOR_PREFIX_LENGTH
)
from fuzzplag.utils.convert_utils import ConvertUtils

CONFIG_NAME = "config.yaml"
SEARCH_DIRS = ("conf", ".")

OUTPUT_FORMATS = ("csv", "text")


@dataclass
class FuzzPlagConfig:
    """Configuration values as read from YAML, before regex compilation."""
    input_path: str = ""
    output_path: str = "result.csv"
    output_format: str = "csv"
    smallfile_threshold: Union[int, str] = 256
    parallel: int = 4
    distance_threshold: Optional[int] = None
    text_threshold: Optional[int] = None
    binary_threshold: Optional[int] = None
    max_depth: int = 16
    author_prefix_length: int = DEFAULT_AUTHOR_PREFIX_LENGTH
    fingerprint_top_level_leaves: bool = False
    distance_metric: str = DistanceMetric.TLSH.value
    log_level: str = "INFO"
    accept_patterns: List[str] = field(default_factory=list)
    ignore_patterns: List[str] = field(default_factory=list)
    text_patterns: List[str] = field(default_factory=list)
    binary_patterns: List[str] = field(default_factory=list)
    source: Optional[str] = None  # file the values were loaded from

    @staticmethod
    def find(search_dirs=SEARCH_DIRS) -> Optional[Path]:
        """Returns the first config.yaml found in the search directories."""
        for directory in search_dirs:
            candidate = Path(directory) / CONFIG_NAME
            if candidate.is_file():
                return candidate
        return None

    @classmethod
    def load(cls, path: Optional[str] = None) -> 'FuzzPlagConfig':
        """
        Load configuration from a YAML file.

        Raises:
            ConfigError: If no file is found, it cannot be read, or it is not valid YAML
        """
        config_path = Path(path) if path else cls.find()
        if config_path is None:
            raise ConfigError(
                f"No {CONFIG_NAME} found in {', '.join(SEARCH_DIRS)}"
            )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Error reading config {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing config {config_path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config {config_path} must be a mapping at the top level")

        config = cls.from_dict(raw)
        config.source = str(config_path)
        return config

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'FuzzPlagConfig':
        config = cls()

        input_section = raw.get('input') or {}
        output_section = raw.get('output') or {}
        if not isinstance(input_section, dict) or not isinstance(output_section, dict):
            raise ConfigError("'input' and 'output' must be mappings with a 'path' key")

        config.input_path = input_section.get('path', config.input_path) or ""
        config.output_path = output_section.get('path', config.output_path)
        config.output_format = output_section.get('format', config.output_format)

        config.smallfile_threshold = raw.get('smallfile-threshold', config.smallfile_threshold)
        config.parallel = raw.get('parallel', config.parallel)
        config.distance_threshold = raw.get('distance-threshold', config.distance_threshold)
        config.text_threshold = raw.get('text-threshold', config.text_threshold)
        config.binary_threshold = raw.get('binary-threshold', config.binary_threshold)
        config.max_depth = raw.get('max-depth', config.max_depth)
        config.author_prefix_length = raw.get('author-prefix-length', config.author_prefix_length)
        top_level_leaves = raw.get('fingerprint-top-level-leaves', config.fingerprint_top_level_leaves)
        if not isinstance(top_level_leaves, bool):
            raise ConfigError(
                f"'fingerprint-top-level-leaves' must be true or false, got {top_level_leaves!r}"
            )
        config.fingerprint_top_level_leaves = top_level_leaves
        config.distance_metric = raw.get('distance-metric', config.distance_metric)
        config.log_level = raw.get('log-level', config.log_level)

        config.accept_patterns = cls._string_list(raw, 'accept-patterns')
        config.ignore_patterns = cls._string_list(raw, 'ignore-patterns')
        config.text_patterns = cls._string_list(raw, 'text-patterns')
        config.binary_patterns = cls._string_list(raw, 'binary-patterns')

        return config

    @staticmethod
    def _string_list(raw: Dict[str, Any], key: str) -> List[str]:
        value = raw.get(key) or []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            raise ConfigError(f"'{key}' must be a list of regular expressions")
        return [str(v) for v in value]

    @property
    def filter_mode(self) -> FilterMode:
        """Text/binary mode as soon as either of its lists is configured."""
        if self.text_patterns or self.binary_patterns:
            return FilterMode.TEXT_BINARY
        return FilterMode.ACCEPT_IGNORE

    def thresholds(self) -> Thresholds:
        text = self.text_threshold if self.text_threshold is not None else self.distance_threshold
        if text is None:
            raise ConfigError("Set 'distance-threshold' or 'text-threshold'")
        binary = self.binary_threshold if self.binary_threshold is not None else text
        try:
            return Thresholds(text=int(text), binary=int(binary))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid distance threshold: {e}") from e

    def to_params(self) -> DetectionParams:
        """
        Compile patterns and build validated DetectionParams.

        Raises:
            ConfigError: On a bad regex, size, threshold or out-of-range value
        """
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Invalid output format '{self.output_format}'. Valid options: {', '.join(OUTPUT_FORMATS)}"
            )

        metric = DISTANCE_METRIC_ALIASES.get(str(self.distance_metric).lower())
        if metric is None:
            raise ConfigError(
                f"Invalid distance metric '{self.distance_metric}'. "
                f"Valid options: {', '.join(DISTANCE_METRIC_CHOICES)}"
            )

        try:
            min_size = ConvertUtils.to_bytes(self.smallfile_threshold)
        except ValueError as e:
            raise ConfigError(f"Invalid smallfile-threshold: {e}") from e

        try:
            return DetectionParams(
                input_path=self.input_path,
                thresholds=self.thresholds(),
                min_size_bytes=min_size,
                parallel=int(self.parallel),
                max_depth=int(self.max_depth),
                author_prefix_length=int(self.author_prefix_length),
                fingerprint_top_level_leaves=self.fingerprint_top_level_leaves,
                filter_mode=self.filter_mode,
                accept_patterns=compile_patterns(self.accept_patterns),
                ignore_patterns=compile_patterns(self.ignore_patterns),
                text_patterns=compile_patterns(self.text_patterns),
                binary_patterns=compile_patterns(self.binary_patterns),
                distance_metric=metric,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def compile_patterns(patterns: List[str]) -> List[Pattern]:
    """Compile each pattern, naming the offending one on failure."""
    compiled = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            raise ConfigError(f"Error compiling regex {p}: {e}") from e
    return compiled
