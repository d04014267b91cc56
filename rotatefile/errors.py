"""Exceptions raised by rotating file streams."""


class RotateFileError(Exception):
    """Base class for all rotating file errors."""


class RotateStateError(RotateFileError):
    """Operation not valid for the stream's current state."""


class StreamClosedError(RotateStateError):
    pass


class RotateIOError(RotateFileError):
    """A filesystem operation failed. The OSError is chained as __cause__."""


class PartialWriteError(RotateIOError):
    """Some bytes reached the file before the write failed."""

    def __init__(self, message: str, written: int):
        super().__init__(message)
        self.written = written


class CompressionError(RotateIOError):
    pass


class RotationCollisionError(RotateFileError):
    """The name picked for a retired or backup file is already taken."""


class BackupOverrunError(RotationCollisionError):
    pass
