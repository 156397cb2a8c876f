"""
Disk space probing.
"""

import logging
from pathlib import Path
from typing import Union

import psutil

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("B", "kB", "MB", "GB", "TB")


def get_free_space(path: Union[str, Path]) -> int:
    """
    Free space in bytes on the volume containing `path`.

    The path itself may not exist yet; its nearest existing parent is probed.

    Raises:
        OSError: If the volume cannot be queried
    """
    probe = Path(path)
    while not probe.exists() and probe.parent != probe:
        probe = probe.parent
    return psutil.disk_usage(str(probe)).free


def format_file_size(size: int) -> str:
    """Human readable size: 1536 -> "1.50 kB"."""
    if abs(size) < 1024:
        return f"{size} B"
    value = float(size)
    for unit in _SIZE_UNITS[1:]:
        value /= 1024
        if abs(value) < 1024 or unit == _SIZE_UNITS[-1]:
            break
    return f"{value:.2f} {unit}"
