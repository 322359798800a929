"""Bounded in-process byte pipe between the archiver and the uploader.

The writer end blocks once `capacity` bytes are buffered and the reader
end blocks until bytes arrive or the writer closes. Closing either end
wakes the peer: a closed writer turns into EOF for the reader, a closed
reader makes further writes raise StreamClosedError.
"""

import threading

from themis_notifier.reporting.types import StreamClosedError

# Bytes buffered between producer and consumer before writes block
DEFAULT_CAPACITY = 256 * 1024
READ_CHUNK_SIZE = 64 * 1024


class ArchiveStream:
    """Single-use byte channel for one category's archive."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._buffer = bytearray()
        self._cond = threading.Condition()
        self._write_closed = False
        self._read_closed = False
        self.writer = _WriteEnd(self)
        self.reader = _ReadEnd(self)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._write_closed and self._read_closed

    def _write(self, data) -> int:
        view = memoryview(data).cast("B")
        written = 0
        with self._cond:
            if self._write_closed:
                raise StreamClosedError("write end is closed")
            while written < len(view):
                while len(self._buffer) >= self._capacity and not self._read_closed:
                    self._cond.wait()
                if self._read_closed:
                    raise StreamClosedError("read end closed before archive was complete")
                room = self._capacity - len(self._buffer)
                chunk = view[written:written + room]
                self._buffer += chunk
                written += len(chunk)
                self._cond.notify_all()
        return written

    def _read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return b"".join(iter(lambda: self._read(READ_CHUNK_SIZE), b""))
        with self._cond:
            if self._read_closed:
                raise StreamClosedError("read end is closed")
            while not self._buffer and not self._write_closed:
                self._cond.wait()
            chunk = bytes(self._buffer[:size])
            del self._buffer[:size]
            self._cond.notify_all()
            return chunk

    def _close_write(self) -> None:
        with self._cond:
            self._write_closed = True
            self._cond.notify_all()

    def _close_read(self) -> None:
        with self._cond:
            self._read_closed = True
            self._buffer.clear()
            self._cond.notify_all()


class _WriteEnd:
    """File-like, write-only, non-seekable."""

    def __init__(self, stream: ArchiveStream):
        self._stream = stream
        self.closed = False

    def write(self, data) -> int:
        return self._stream._write(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True
        self._stream._close_write()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


class _ReadEnd:
    """File-like, read-only. No fileno/tell/seek, so HTTP clients stream it chunked."""

    def __init__(self, stream: ArchiveStream):
        self._stream = stream
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        return self._stream._read(size)

    def __iter__(self):
        while True:
            chunk = self.read(READ_CHUNK_SIZE)
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        self.closed = True
        self._stream._close_read()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False
