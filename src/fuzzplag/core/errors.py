"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception types shared by the detection pipeline.
Fatal errors propagate to the CLI; per-entry errors are logged and skipped.
"""


class FuzzPlagError(RuntimeError):
    """Base class for all errors raised by fuzzplag."""


class ConfigError(FuzzPlagError):
    """Configuration file missing, malformed, or holding invalid values."""


class ArchiveError(FuzzPlagError):
    """Root archive cannot be opened or read."""


class FingerprintError(FuzzPlagError):
    """Entry content cannot be fingerprinted or two digests cannot be compared."""


class ReportError(FuzzPlagError):
    """Report file cannot be opened or written."""
