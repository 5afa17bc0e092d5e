"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/classifier.py
Content sniffing for archive entries. Looks only at magic bytes, never at names,
so a renamed submission (homework.txt that is really a zip) is still descended into.
"""

import logging

import filetype

from fuzzplag.core.interfaces import ContentClassifier
from fuzzplag.core.models import EntryKind

logger = logging.getLogger(__name__)

CONTAINER_EXTENSIONS = frozenset({"zip"})

# Archive formats recognised but not opened
UNSUPPORTED_EXTENSIONS = frozenset({
    "rar", "7z", "tar", "gz", "bz2", "xz", "zst", "lz", "cab", "ar",
})


class FileTypeClassifierImpl(ContentClassifier):
    """Classifies byte buffers with the `filetype` magic-number matchers."""

    def classify(self, data: bytes) -> EntryKind:
        kind = filetype.guess(data)
        if kind is None:
            return EntryKind.OTHER

        logger.debug(f"File type: {kind.mime}")

        if kind.extension in CONTAINER_EXTENSIONS:
            return EntryKind.CONTAINER
        if kind.extension in UNSUPPORTED_EXTENSIONS:
            return EntryKind.UNSUPPORTED
        return EntryKind.OTHER
