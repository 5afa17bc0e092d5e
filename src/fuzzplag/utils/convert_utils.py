"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size conversions for the `smallfile-threshold` setting and for log output.
"""
import re
from typing import Union

_SIZE_RE = re.compile(r"^(?P<value>[+-]?\d+(?:\.\d+)?)\s*(?P<unit>[KMG]?B?)$")

_MULTIPLIERS = {"": 1, "B": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3}

_UNITS = ("B", "KB", "MB", "GB")


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """Render a byte count with two decimals, e.g. 1536 -> '1.50KB'."""
        if size_bytes < 0:
            return "0B"
        size = float(size_bytes)
        for unit in _UNITS[:-1]:
            if size < 1024:
                return f"{size:.2f}{unit}"
            size /= 1024
        return f"{size:.2f}{_UNITS[-1]}"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Parse '256', '1K', '2KB', '1.5MB' or '1G' (binary multiples) into bytes.
        Raises ValueError for negative sizes or anything else.
        """
        text = size_str.strip().upper()
        match = _SIZE_RE.match(text)
        if not match:
            raise ValueError(
                f"Invalid size format: '{size_str}'. Supported formats: 256, 1K, 2KB, 1.5MB, 1G"
            )

        value = float(match.group("value"))
        if value < 0:
            raise ValueError(f"Negative size not allowed: '{size_str}'")

        unit = match.group("unit").rstrip("B") or match.group("unit")
        return int(value * _MULTIPLIERS[unit])

    @staticmethod
    def to_bytes(value: Union[int, str]) -> int:
        """Accept a plain integer (YAML `256`) or a human-readable string (YAML `1K`)."""
        if isinstance(value, bool):
            raise ValueError(f"Invalid size value: {value!r}")
        if isinstance(value, int):
            if value < 0:
                raise ValueError(f"Negative size not allowed: '{value}'")
            return value
        return ConvertUtils.human_to_bytes(str(value))
