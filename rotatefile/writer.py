"""Append-only byte stream backed by files rotated on calendar buckets or size."""

import logging
import os
import sys
import threading
from datetime import datetime, timedelta, tzinfo

from rotatefile.buckets import MINUTE, layout_for, next_boundary
from rotatefile.config import StreamConfig, local_timezone
from rotatefile.errors import (
    PartialWriteError,
    RotateFileError,
    RotateIOError,
    RotateStateError,
    RotationCollisionError,
    StreamClosedError,
)
from rotatefile.rotator import cleanup_backups, compress_file, retired_name, split_path

logger = logging.getLogger(__name__)


def _log_background_error(exc: Exception):
    logger.error("Background compression/cleanup failed: %s", exc)


class RotateFile:
    """Thread-safe writer that rotates its file when a time bucket ends or
    the size limit would be exceeded.

    Retired files are gzipped and pruned on a background thread. An empty
    path writes to the fallback sink (stderr by default), which never
    rotates.
    """

    def __init__(
        self,
        path: str,
        max_age: timedelta,
        max_size: int,
        max_backups: int,
        *,
        timezone: tzinfo | None = None,
        sink=None,
        error_handler=None,
        time_func=None,
    ):
        self._path = path
        self._dir, self._base, self._ext = split_path(path)
        self._max_age = max_age
        self._max_size = max_size
        self._max_backups = max_backups
        self._timezone = timezone or local_timezone()
        self._sink = sink
        self._error_handler = error_handler or _log_background_error
        self._time_func = time_func or (lambda: datetime.now().astimezone())
        self._lock = threading.Lock()
        self._file = None
        self._size = 0
        self._start: datetime | None = None
        self._next_start: datetime | None = None
        self._closed = False
        self._background: list[threading.Thread] = []
        if max_age < MINUTE:
            logger.warning(
                "Rotation period %s is under a minute, rotating daily instead", max_age
            )

    @classmethod
    def from_config(cls, config: StreamConfig, **kwargs) -> "RotateFile":
        kwargs.setdefault("timezone", config.zone)
        return cls(
            config.path,
            config.max_age,
            config.max_size_bytes,
            config.max_backups,
            **kwargs,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Accessors

    @property
    def name(self) -> str:
        f = self._file
        if f is not None:
            return getattr(f, "name", self._path)
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        return self._size

    @property
    def start(self) -> datetime | None:
        return self._start

    @property
    def next_start(self) -> datetime | None:
        return self._next_start

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, size: int):
        with self._lock:
            self._max_size = size

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    @max_age.setter
    def max_age(self, age: timedelta):
        with self._lock:
            self._max_age = age
            if self._start is not None:
                self._next_start = next_boundary(self._start, age, self._timezone)

    @property
    def max_backups(self) -> int:
        return self._max_backups

    @max_backups.setter
    def max_backups(self, count: int):
        with self._lock:
            self._max_backups = count

    @property
    def timezone(self) -> tzinfo:
        return self._timezone

    @timezone.setter
    def timezone(self, tz: tzinfo):
        with self._lock:
            self._timezone = tz
            if self._start is not None:
                self._start = self._start.astimezone(tz)
                self._next_start = next_boundary(self._start, self._max_age, tz)

    # Public API

    def write(self, data: bytes) -> int:
        """Append *data*, rotating first if due. Returns the bytes written."""
        if isinstance(data, str):
            raise TypeError("write() argument must be bytes, not str")
        rotated = (None, None)
        try:
            with self._lock:
                if self._closed:
                    raise StreamClosedError(f"write {self._path or '<sink>'}: file already closed")
                if self._file is None:
                    self._open()
                now = self._now()
                if self._start is None:
                    self._begin_bucket(now)
                if self._path and self._needs_rotate(now, len(data)):
                    rotated = self._rotate_only()
                    self._open()
                    self._begin_bucket(now)
                return self._append(data)
        finally:
            self._start_background(*rotated)

    def rotate(self) -> str | None:
        """Retire the active file now. Returns the retired path, None for the sink."""
        with self._lock:
            retired, ts = self._rotate_only()
        self._start_background(retired, ts)
        return retired

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            f, self._file = self._file, None
            if self._path and f is not None:
                try:
                    f.close()
                except OSError as e:
                    raise RotateIOError(f"can't close log file {self._path}") from e

    def join_background(self, timeout: float | None = None):
        """Wait for compression/cleanup threads started so far."""
        with self._lock:
            pending = list(self._background)
        for t in pending:
            t.join(timeout)

    # Internal helpers (lock held)

    def _now(self) -> datetime:
        return self._time_func().astimezone(self._timezone)

    def _open(self):
        if not self._path:
            self._file = self._sink if self._sink is not None else sys.stderr.buffer
            return
        try:
            if self._dir:
                os.makedirs(self._dir, exist_ok=True)
            self._file = open(self._path, "ab", buffering=0)
        except OSError as e:
            raise RotateIOError(f"can't open log file {self._path}") from e
        try:
            self._size = os.fstat(self._file.fileno()).st_size
        except OSError:
            self._size = 0

    def _begin_bucket(self, now: datetime):
        self._start = now
        self._next_start = next_boundary(now, self._max_age, self._timezone)

    def _needs_rotate(self, now: datetime, size: int) -> bool:
        if now >= self._next_start:
            return True
        return self._max_size > 0 and self._size + size > self._max_size

    def _append(self, data: bytes) -> int:
        view = memoryview(data)
        written = 0
        try:
            while written < len(view):
                n = self._file.write(view[written:])
                if not n:
                    raise OSError(f"short write after {written} bytes")
                written += n
        except OSError as e:
            self._size += written
            if written:
                raise PartialWriteError(
                    f"write {self.name}: wrote {written} of {len(view)} bytes", written
                ) from e
            raise RotateIOError(f"can't write log file {self.name}") from e
        self._size += written

        try:
            if self._path:
                os.fsync(self._file.fileno())
            else:
                self._file.flush()
        except OSError as e:
            raise RotateIOError(f"can't sync log file {self.name}") from e
        return written

    def _rotate_only(self) -> tuple[str | None, str | None]:
        if self._closed:
            raise RotateStateError("can't rotate closed log file")
        if not self._path:
            return None, None
        if self._file is None:
            raise RotateStateError(f"can't rotate {self._path}: no file open")

        try:
            self._file.write(f"rotating {self._path}\n".encode())
        except OSError as e:
            logger.debug("Can't write rotation marker to %s: %s", self._path, e)
        f, self._file = self._file, None
        try:
            f.close()
        except OSError as e:
            raise RotateIOError(f"can't close log file {self._path}") from e

        start = self._start or self._now()
        ts = start.astimezone(self._timezone).strftime(layout_for(self._max_age))
        retired = retired_name(self._dir, self._base, self._ext, ts)
        try:
            os.stat(retired)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise RotateIOError(f"can't stat rotation file {retired}") from e
        else:
            raise RotationCollisionError(f"rotated log file {retired} already exists")

        try:
            os.rename(self._path, retired)
        except OSError as e:
            raise RotateIOError(f"can't rotate log file {self._path} to {retired}") from e
        self._start = None
        self._next_start = None
        logger.info("Rotated %s -> %s", self._path, retired)
        return retired, ts

    # Background

    def _start_background(self, retired: str | None, ts: str | None):
        """Compress and prune a retired file on a daemon thread. Called without the lock."""
        if not retired:
            return
        t = threading.Thread(
            target=self._compress_and_cleanup,
            args=(retired, ts),
            name=f"rotatefile-compress-{self._base}",
            daemon=True,
        )
        with self._lock:
            self._background = [b for b in self._background if b.is_alive()]
            self._background.append(t)
        t.start()

    def _compress_and_cleanup(self, retired: str, ts: str):
        try:
            compress_file(retired, self._dir, self._base, self._ext, ts)
            deleted = cleanup_backups(self._dir, self._base, self._ext, self._max_backups)
            if deleted:
                logger.info("Purged %d backup(s) for %s", len(deleted), self._path)
        except (RotateFileError, OSError) as e:
            self._error_handler(e)
