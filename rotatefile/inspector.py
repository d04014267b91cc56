"""Inspector logic: list, read, and search the files of one rotating stream."""

import gzip
import os
import re

from rotatefile.rotator import split_path


def list_stream_files(path: str) -> list[str]:
    """Return the active file, retired files and backups of a stream, sorted by name."""
    dir_name, base, ext = split_path(path)
    active = os.path.basename(path)
    b, e = re.escape(base), re.escape(ext)
    # Retired: base-{ts}_x{16 hex}{ext}. Backup: base-{ts}_{NNN}{ext}.gz.
    rotated = re.compile(rf"^{b}-.+_(x[0-9a-f]{{16}}{e}|[0-9]{{3}}{e}\.gz)$")
    files = []
    for name in os.listdir(dir_name or "."):
        if name == active or rotated.match(name):
            files.append(name)
    files.sort()
    return files


def read_file(dir_name: str, filename: str) -> bytes:
    """Read a stream file, transparently decompressing .gz backups."""
    path = os.path.join(dir_name, filename)
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")
    if filename.endswith(".gz"):
        with gzip.open(path, "rb") as f:
            return f.read()
    with open(path, "rb") as f:
        return f.read()


def search_files(path: str, text: str) -> list[tuple[str, int, str]]:
    """Search for text across a stream's files. Returns (filename, line_num, line) tuples."""
    dir_name = os.path.dirname(path)
    results = []
    for filename in list_stream_files(path):
        full = os.path.join(dir_name, filename)
        try:
            if filename.endswith(".gz"):
                f = gzip.open(full, "rt", errors="replace")
            else:
                f = open(full, "r", errors="replace")
            with f:
                for line_num, line in enumerate(f, 1):
                    if text in line:
                        results.append((filename, line_num, line.rstrip("\n")))
        except (OSError, gzip.BadGzipFile):
            continue
    return results
