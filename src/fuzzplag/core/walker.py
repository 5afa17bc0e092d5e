"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Recursive descent into in-memory zip archives.
Features:
- Explicit worklist instead of call-stack recursion, with a configurable depth cap
- Skips directories and entries below the small-file threshold
- Sniffs nested containers from content, not from entry names
- Corrupt or unreadable branches are logged and skipped, never fatal
"""

import io
import logging
import zipfile
import zlib
from typing import Iterator, List, Tuple

from fuzzplag.core.interfaces import ArchiveWalker, ContentClassifier
from fuzzplag.core.models import EntryKind

logger = logging.getLogger(__name__)

# Everything zipfile may raise for a damaged, encrypted or exotic entry
READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    OSError,
    RuntimeError,
    NotImplementedError,
    ValueError,
)

CONTAINER_SEPARATOR = "/"


class ArchiveWalkerImpl(ArchiveWalker):
    """
    Walks a container archive and every container nested inside it.

    Attributes:
        classifier: Content classifier used to detect nested containers
        min_size: Entries whose decompressed size is below this are skipped
        max_depth: Deepest container level that is still opened
    """

    def __init__(self, classifier: ContentClassifier, min_size: int = 0, max_depth: int = 16):
        self.classifier = classifier
        self.min_size = min_size
        self.max_depth = max_depth

    def walk(self, data: bytes, prefix: str, depth: int = 1) -> Iterator[Tuple[str, bytes]]:
        """
        Yields (logical path, bytes) for every leaf entry reachable from `data`.

        Args:
            data: Raw bytes of a zip container
            prefix: Logical path accumulated so far (e.g. "outer.zip:")
            depth: Nesting level of `data` itself
        """
        worklist: List[Tuple[bytes, str, int]] = [(data, prefix, depth)]

        while worklist:
            archive_bytes, archive_prefix, level = worklist.pop()

            try:
                archive = zipfile.ZipFile(io.BytesIO(archive_bytes))
            except READ_ERRORS as e:
                logger.warning(f"Error opening in-memory zip file {archive_prefix!r}: {e}")
                continue

            with archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue

                    name = info.filename
                    logger.debug(f"Visiting {archive_prefix}{name}")

                    try:
                        entry = archive.read(info)
                    except READ_ERRORS as e:
                        logger.warning(f"Error opening in-memory file {archive_prefix}{name}: {e}")
                        continue

                    # Ignore empty or small files
                    if len(entry) < self.min_size:
                        continue

                    kind = self.classifier.classify(entry)

                    if kind == EntryKind.CONTAINER:
                        if level >= self.max_depth:
                            logger.warning(
                                f"Skipping {archive_prefix}{name}: nesting deeper than {self.max_depth}"
                            )
                            continue
                        logger.debug(f"Recurring into {archive_prefix}{name}")
                        worklist.append(
                            (entry, archive_prefix + name + CONTAINER_SEPARATOR, level + 1)
                        )
                    elif kind == EntryKind.UNSUPPORTED:
                        logger.warning(f"File {archive_prefix}{name} is an unsupported archive")
                    else:
                        yield archive_prefix + name, entry
