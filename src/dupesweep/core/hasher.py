"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
File hashing utilities with pluggable hash algorithms.

The partial hash covers the first and last PARTIAL_SIZE bytes (the whole file
when it is small), the full hash streams the entire content.
"""

import xxhash
from dupesweep.core.interfaces import HashAlgorithm

PARTIAL_SIZE = 16 * 1024  # 16KB from each end
READ_BUFFER_SIZE = 64 * 1024


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    def new(self):
        return xxhash.xxh64()


class HasherImpl:
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Read errors propagate as OSError; the caller decides whether to skip the file.
    """

    def __init__(self, algorithm: HashAlgorithm = None):
        self.algorithm = algorithm or XXHashAlgorithmImpl()

    def compute_partial_hash(self, path: str, size: int) -> str:
        """Hash of the first and last PARTIAL_SIZE bytes."""
        hasher = self.algorithm.new()
        with open(path, 'rb') as f:
            if size <= PARTIAL_SIZE * 2:
                hasher.update(f.read())
            else:
                hasher.update(f.read(PARTIAL_SIZE))
                f.seek(-PARTIAL_SIZE, 2)
                hasher.update(f.read(PARTIAL_SIZE))
        return hasher.hexdigest()

    def compute_full_hash(self, path: str) -> str:
        """Hash of the whole content, read in READ_BUFFER_SIZE chunks."""
        hasher = self.algorithm.new()
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(READ_BUFFER_SIZE), b''):
                hasher.update(chunk)
        return hasher.hexdigest()
