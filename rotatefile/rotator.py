"""Post-rotation operations: compression and retention enforcement."""

import glob
import gzip
import logging
import os
import secrets
import shutil

from rotatefile.errors import (
    BackupOverrunError,
    CompressionError,
    RotateIOError,
)

logger = logging.getLogger(__name__)

MAX_BACKUP_SEQUENCE = 1000


def split_path(path: str) -> tuple[str, str, str]:
    """Split a stream path into (directory, base name, extension)."""
    dir_name, file_name = os.path.split(path)
    base, ext = os.path.splitext(file_name)
    return dir_name, base, ext


def retired_name(dir_name: str, base: str, ext: str, ts: str) -> str:
    """Uncompressed rotated file: ``base-{ts}_x{16 hex}{ext}``."""
    return os.path.join(dir_name, f"{base}-{ts}_x{secrets.token_hex(8)}{ext}")


def backup_name(dir_name: str, base: str, ext: str, ts: str, seq: int) -> str:
    """Compressed backup: ``base-{ts}_{NNN}{ext}.gz``."""
    return os.path.join(dir_name, f"{base}-{ts}_{seq:03d}{ext}.gz")


def backup_pattern(dir_name: str, base: str, ext: str) -> str:
    return os.path.join(
        glob.escape(dir_name),
        f"{glob.escape(base)}-*_[0-9][0-9][0-9]{glob.escape(ext)}.gz",
    )


def _create_backup(dir_name: str, base: str, ext: str, ts: str):
    for seq in range(MAX_BACKUP_SEQUENCE):
        path = backup_name(dir_name, base, ext, ts, seq)
        try:
            return path, open(path, "xb")
        except FileExistsError:
            continue
        except OSError as e:
            # Unwritable candidate; a later sequence may still work.
            logger.debug("Can't create backup %s: %s", path, e)
    raise BackupOverrunError(
        f"backup overrun, more than {MAX_BACKUP_SEQUENCE} backup files for "
        f"{backup_name(dir_name, base, ext, ts, MAX_BACKUP_SEQUENCE - 1)}"
    )


def compress_file(retired_path: str, dir_name: str, base: str, ext: str, ts: str) -> str:
    """Gzip a retired file into the first free backup name. Returns the .gz path.

    The retired file is removed only once the backup is complete. A backup
    that fails half-way is left on disk for inspection.
    """
    try:
        f_in = open(retired_path, "rb")
    except OSError as e:
        raise RotateIOError(f"can't open uncompressed log file {retired_path}") from e

    with f_in:
        gz_path, f_out = _create_backup(dir_name, base, ext, ts)
        try:
            with f_out, gzip.GzipFile(fileobj=f_out, mode="wb") as gz_out:
                shutil.copyfileobj(f_in, gz_out)
        except OSError as e:
            raise CompressionError(f"error gzipping log file {gz_path}") from e

    try:
        os.remove(retired_path)
    except OSError as e:
        raise RotateIOError(f"error removing uncompressed log file {retired_path}") from e
    logger.info("Compressed %s -> %s", retired_path, gz_path)
    return gz_path


def cleanup_backups(dir_name: str, base: str, ext: str, max_backups: int) -> list[str]:
    """Delete the oldest backups beyond *max_backups*. Returns deleted paths.

    Names sort chronologically (timestamp, then sequence). A file that
    can't be removed is logged and skipped.
    """
    if max_backups <= 0:
        return []
    backups = glob.glob(backup_pattern(dir_name, base, ext))
    if len(backups) <= max_backups:
        return []

    backups.sort()
    logger.info("Keeping %d of %d backups for %s", max_backups, len(backups), base)
    deleted = []
    for path in backups[:len(backups) - max_backups]:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Failed to remove old backup %s: %s", path, e)
            continue
        logger.info("Removed old backup %s", path)
        deleted.append(path)
    return deleted
