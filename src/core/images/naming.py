"""
Storage key naming policy.

Keys are made unique probabilistically: either 128 random bits or a
millisecond timestamp prefix. Nothing checks the bucket for collisions.
"""

import re
import secrets
import time
from typing import Optional

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_TRAILING_EXTENSION = re.compile(r"\.[^/.]+$")


def file_extension(filename: str) -> str:
    """Return the text after the last dot, or '' when there is none."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1]


def replace_extension(filename: str, extension: str) -> str:
    """Swap the final extension of filename, appending one if it has none."""
    if _TRAILING_EXTENSION.search(filename):
        return _TRAILING_EXTENSION.sub(f".{extension}", filename)
    return f"{filename}.{extension}"


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", filename)


def generate_object_key(
    filename: str,
    use_random_name: bool = False,
    now_ms: Optional[int] = None,
) -> str:
    """
    Derive a storage key for an uploaded file.

    Random mode: 16 random bytes as hex plus the original extension.
    Default mode: "<timestamp_ms>_<sanitized filename>".
    """
    if use_random_name:
        token = secrets.token_hex(16)
        ext = file_extension(filename)
        return f"{token}.{ext}" if ext else token

    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{now_ms}_{sanitize_filename(filename)}"
