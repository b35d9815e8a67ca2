"""File locking for safe reads of the log file."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, TextIO

import portalocker


@contextmanager
def shared_read(path: Path, timeout: float = 5.0, encoding: str = "utf-8") -> Generator[TextIO, None, None]:
    """Open a file for reading under a shared lock.

    Concurrent readers don't block each other; a writer holding an exclusive
    lock makes this wait up to timeout seconds.

    Args:
        path: File to read
        timeout: Seconds to wait for the lock
        encoding: Text encoding

    Yields:
        File handle for reading

    Raises:
        portalocker.LockException: If the lock cannot be acquired
    """
    lock = portalocker.Lock(
        str(path),
        mode="r",
        timeout=timeout,
        flags=portalocker.LockFlags.SHARED | portalocker.LockFlags.NON_BLOCKING,
        encoding=encoding,
    )
    with lock as f:
        yield f
