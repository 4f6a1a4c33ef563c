"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
"""
import time
from typing import Optional


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int, decimals: int = 2) -> str:
        """
        Convert bytes to human-readable string (e.g., 0 B, 1.5 KB, 3.2 MB).
        """
        if size_bytes <= 0:
            return "0 B"

        units = ["B", "KB", "MB", "GB", "TB", "PB"]
        value = float(size_bytes)
        for unit in units:
            if value < 1024:
                if unit == "B":
                    return f"{int(value)} B"
                return f"{value:.{decimals}f} {unit}"
            value /= 1024
        return f"{value:.{decimals}f} EB"

    @staticmethod
    def progress_to_human(phase: str, current: int, total: Optional[int]) -> str:
        """One-line progress readout; an indeterminate phase shows only the counter."""
        if total and total > 0:
            percent = min(100.0, (current / total) * 100)
            return f"[{phase}] {current}/{total} ({percent:.1f}%)"
        return f"[{phase}] {current}..."

    @staticmethod
    def timestamp_to_human(timestamp: float, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """
        Convert a Unix timestamp to a human-readable string.
        Uses local time by default.
        """
        try:
            return time.strftime(fmt, time.localtime(timestamp))
        except (OverflowError, OSError, ValueError):
            return "Invalid timestamp"
