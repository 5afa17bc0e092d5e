"""
Shared fixtures for fuzzplag tests.
Builds zip archives (nested when needed) in isolated temporary directories
and provides deterministic stand-ins for the fuzzy hash.
"""
import io
import random
import zipfile
from pathlib import Path
from typing import Dict, Optional, Union
import sys

import pytest

# Make the src/ layout importable without an editable install
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from fuzzplag.core.errors import FingerprintError
from fuzzplag.core.models import DetectionParams, Thresholds

WORDS = (
    "int", "return", "while", "for", "if", "else", "printf", "scanf", "struct", "node",
    "list", "head", "tail", "malloc", "free", "sizeof", "char", "buffer", "index", "count",
    "value", "result", "main", "void", "static", "const", "break", "continue", "switch", "case",
)


def sample_text(seed: int, size: int = 500) -> bytes:
    """Pseudo-random source-like text of exactly `size` bytes."""
    rng = random.Random(seed)
    out = []
    length = 0
    while length < size:
        word = rng.choice(WORDS) + rng.choice((" ", " ", "\n", "; ", "(", ") "))
        out.append(word)
        length += len(word)
    return "".join(out).encode("ascii")[:size]


def make_zip(entries: Dict[str, Optional[bytes]], path: Optional[Union[str, Path]] = None) -> bytes:
    """
    Builds a zip archive from {name: content}. A None content creates a directory entry.
    Writes it to `path` when given and always returns the bytes.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries.items():
            if content is None:
                archive.writestr(zipfile.ZipInfo(name.rstrip("/") + "/"), b"")
            else:
                archive.writestr(name, content)
    data = buffer.getvalue()
    if path is not None:
        Path(path).write_bytes(data)
    return data


RAR_BYTES = b"Rar!\x1a\x07\x00" + b"\x00" * 1000


class CharDiffAlgorithm:
    """
    Fake fuzzy hash: the digest is the content itself and the distance counts
    differing characters (plus any length difference).
    """

    def __init__(self):
        self.calls = 0

    def fingerprint(self, data: bytes) -> str:
        self.calls += 1
        if not data.strip():
            raise FingerprintError("blank content")
        return data.decode("latin-1")

    def distance(self, a: str, b: str) -> int:
        return sum(1 for x, y in zip(a, b) if x != y) + abs(len(a) - len(b))


class TableAlgorithm:
    """Fake fuzzy hash with explicit pairwise distances; unknown pairs are far apart."""

    def __init__(self, distances: Dict[frozenset, int], default: int = 1000):
        self.distances = distances
        self.default = default

    def fingerprint(self, data: bytes) -> str:
        return data.decode("ascii")

    def distance(self, a: str, b: str) -> int:
        if a == b:
            return 0
        return self.distances.get(frozenset((a, b)), self.default)


@pytest.fixture
def char_diff():
    return CharDiffAlgorithm()


@pytest.fixture
def make_params():
    """Factory for DetectionParams with test-friendly defaults."""
    def _make(input_path, **overrides) -> DetectionParams:
        values = dict(
            input_path=str(input_path),
            thresholds=Thresholds(text=10),
            min_size_bytes=16,
            parallel=2,
        )
        values.update(overrides)
        return DetectionParams(**values)
    return _make


@pytest.fixture
def submissions_zip(tmp_path) -> Path:
    """
    Root archive laid out one zip per student, plus noise:
    - alice123456.zip: src/main.c, src/util.c, tiny.txt (below threshold), notes.rar
    - bob654321xx.zip: src/main.c (near copy of alice's) and a nested extra.zip
    - readme.txt at top level (plain leaf)
    - docs/ directory entry
    """
    alice_main = sample_text(1)
    bob_main = bytearray(alice_main)
    bob_main[10:13] = b"XYZ"

    alice = make_zip({
        "src/main.c": alice_main,
        "src/util.c": sample_text(2),
        "tiny.txt": b"hi",
        "notes.rar": RAR_BYTES,
        "src/": None,
    })
    bob_extra = make_zip({"extra/helper.c": sample_text(3)})
    bob = make_zip({
        "src/main.c": bytes(bob_main),
        "extra.zip": bob_extra,
    })

    root = tmp_path / "submissions.zip"
    make_zip({
        "alice123456.zip": alice,
        "bob654321xx.zip": bob,
        "readme.txt": sample_text(4),
        "docs/": None,
    }, root)
    return root
