"""
Metadata fingerprints for polled paths.

A fingerprint is an opaque string built from modification times and sizes;
only equality between two fingerprints of the same path is meaningful.
File contents are never read, so edits that keep both size and mtime are
not detected.
"""

import os
import stat
from typing import Iterator, Tuple


def fingerprint(path: str) -> str:
    """
    Fingerprint a file or directory.

    Files: `f:<mtime_ns>:<size>`.
    Directories: `<path>:<mtime_ns>:<size>|` for every non-directory entry,
    depth first, entries of each directory in lexical order.

    Raises:
        OSError: the path or any entry below it cannot be stat'ed or listed
    """
    st = os.stat(path)
    if not stat.S_ISDIR(st.st_mode):
        return f"f:{st.st_mtime_ns}:{st.st_size}"

    return "".join(
        f"{entry_path}:{entry_stat.st_mtime_ns}:{entry_stat.st_size}|"
        for entry_path, entry_stat in _walk_entries(path)
    )


def _walk_entries(root: str) -> Iterator[Tuple[str, os.stat_result]]:
    """Yield (path, lstat) for every non-directory entry below root"""
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_entries(entry.path)
        else:
            yield entry.path, entry.stat(follow_symlinks=False)
