"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements fuzzy fingerprinting of archive entries using pluggable algorithms.

TLSH provides the similarity-preserving digest; xxHash64 keys a per-instance cache
so identical entry bytes (boilerplate, template files) are fingerprinted only once.
"""

import logging
from typing import Dict

import tlsh
import xxhash

from fuzzplag.core.errors import FingerprintError
from fuzzplag.core.interfaces import FingerprintAlgorithm
from fuzzplag.core.models import DistanceMetric, Fingerprint

logger = logging.getLogger(__name__)

# Returned by tlsh.hash when the input is too short or has too little variance
_TLSH_NULL_DIGESTS = ("", "TNULL")


def content_key(data: bytes) -> str:
    """xxHash64 hex digest of raw bytes."""
    return xxhash.xxh64(data).hexdigest()


# Use the same way to implement and use any other fuzzy hashing algorithm
class TlshAlgorithmImpl(FingerprintAlgorithm):
    """TLSH digest with the native TLSH difference score as distance."""

    def fingerprint(self, data: bytes) -> str:
        digest = tlsh.hash(data)
        if digest in _TLSH_NULL_DIGESTS:
            raise FingerprintError(
                f"TLSH needs more input variance (got {len(data)} bytes)"
            )
        return digest

    def distance(self, a: str, b: str) -> int:
        return tlsh.diff(a, b)


class HammingTlshAlgorithmImpl(TlshAlgorithmImpl):
    """
    TLSH digest compared character by character.
    Coarser than the native score but matches how digest strings were compared historically.
    """

    def distance(self, a: str, b: str) -> int:
        if len(a) != len(b):
            raise FingerprintError(
                f"Cannot compare digests of different length ({len(a)} != {len(b)})"
            )
        return sum(1 for x, y in zip(a, b) if x != y)


def algorithm_for(metric: DistanceMetric) -> FingerprintAlgorithm:
    """Returns the fingerprint algorithm implementing the given distance metric."""
    if metric == DistanceMetric.HAMMING:
        return HammingTlshAlgorithmImpl()
    return TlshAlgorithmImpl()


class FingerprinterImpl:
    """
    Builds Fingerprint records for leaf entries.
    Caches digests by content hash; an instance is owned by a single worker
    and is not safe to share between threads.
    """

    def __init__(self, algorithm: FingerprintAlgorithm):
        self.algorithm = algorithm
        self._cache: Dict[str, str] = {}
        self.cache_hits = 0

    def fingerprint(self, path: str, data: bytes) -> Fingerprint:
        """
        Computes the fingerprint of one entry.

        Raises:
            FingerprintError: If the algorithm cannot digest the content
        """
        key = content_key(data)
        digest = self._cache.get(key)
        if digest is None:
            digest = self.algorithm.fingerprint(data)
            self._cache[key] = digest
        else:
            self.cache_hits += 1

        logger.debug(f"Hash success: {path} -> {digest}")
        return Fingerprint(path=path, digest=digest, size=len(data), content_hash=key)
