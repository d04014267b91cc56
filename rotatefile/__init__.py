"""Rotating file writer with calendar-aligned buckets, gzip backups and retention."""

from rotatefile.buckets import layout_for, next_boundary
from rotatefile.config import StreamConfig, load_config, load_yaml_config
from rotatefile.errors import (
    BackupOverrunError,
    CompressionError,
    PartialWriteError,
    RotateFileError,
    RotateIOError,
    RotateStateError,
    RotationCollisionError,
    StreamClosedError,
)
from rotatefile.rotator import cleanup_backups, compress_file
from rotatefile.writer import RotateFile

__all__ = [
    "BackupOverrunError",
    "CompressionError",
    "PartialWriteError",
    "RotateFile",
    "RotateFileError",
    "RotateIOError",
    "RotateStateError",
    "RotationCollisionError",
    "StreamClosedError",
    "StreamConfig",
    "cleanup_backups",
    "compress_file",
    "layout_for",
    "load_config",
    "load_yaml_config",
    "next_boundary",
]
