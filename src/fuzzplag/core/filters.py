"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/filters.py
Regex allow-list filtering of fingerprint paths.

Two policies are supported:
  • accept/ignore      : kept iff some accept pattern matches and no ignore pattern does
  • text/binary/ignore : kept iff some text or binary pattern matches and no ignore pattern does;
                         a binary match makes the entry BINARY, otherwise it is TEXT
Patterns are searched anywhere in the full logical path. Ignore always wins.
"""

import dataclasses
from typing import List, Pattern

from fuzzplag.core.interfaces import PathFilter
from fuzzplag.core.models import Category, DetectionParams, FilterMode, Fingerprint


def _matches_any(patterns: List[Pattern], path: str) -> bool:
    return any(p.search(path) for p in patterns)


class AcceptIgnoreFilter(PathFilter):
    def __init__(self, accept_patterns: List[Pattern], ignore_patterns: List[Pattern]):
        self.accept_patterns = accept_patterns
        self.ignore_patterns = ignore_patterns

    def keeps(self, path: str) -> bool:
        if not _matches_any(self.accept_patterns, path):
            return False
        return not _matches_any(self.ignore_patterns, path)

    def categorize(self, path: str) -> Category:
        return Category.TEXT

    def apply(self, fingerprints: List[Fingerprint]) -> List[Fingerprint]:
        return [
            dataclasses.replace(f, category=self.categorize(f.path))
            for f in fingerprints if self.keeps(f.path)
        ]


class TextBinaryFilter(PathFilter):
    def __init__(
        self,
        text_patterns: List[Pattern],
        binary_patterns: List[Pattern],
        ignore_patterns: List[Pattern]
    ):
        self.text_patterns = text_patterns
        self.binary_patterns = binary_patterns
        self.ignore_patterns = ignore_patterns

    def keeps(self, path: str) -> bool:
        if not (_matches_any(self.text_patterns, path) or _matches_any(self.binary_patterns, path)):
            return False
        return not _matches_any(self.ignore_patterns, path)

    def categorize(self, path: str) -> Category:
        """Binary takes precedence when both a text and a binary pattern match."""
        if _matches_any(self.binary_patterns, path):
            return Category.BINARY
        return Category.TEXT

    def apply(self, fingerprints: List[Fingerprint]) -> List[Fingerprint]:
        return [
            dataclasses.replace(f, category=self.categorize(f.path))
            for f in fingerprints if self.keeps(f.path)
        ]


def build_path_filter(params: DetectionParams) -> PathFilter:
    """Returns the filter policy selected by the parameters."""
    if params.filter_mode == FilterMode.TEXT_BINARY:
        return TextBinaryFilter(params.text_patterns, params.binary_patterns, params.ignore_patterns)
    return AcceptIgnoreFilter(params.accept_patterns, params.ignore_patterns)
