from __future__ import annotations

import hashlib
import os
import tempfile


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def write_atomic(path: str, data: bytes) -> str:
    """Replace ``path`` with ``data`` in one rename and return its sha256.

    Parent directories are created as needed. Readers see either the old
    file or the complete new one.
    """
    dir_path = os.path.dirname(path) or "."
    os.makedirs(dir_path, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=dir_path, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
    return sha256_hex(data)


def existing_digest(path: str) -> str | None:
    """sha256 of the file at ``path``, or None when there is no such file."""
    try:
        with open(path, "rb") as fh:
            return sha256_hex(fh.read())
    except FileNotFoundError:
        return None
