"""Newline-delimited message framing.

The transport delivers arbitrary byte chunks. ``FrameReader`` buffers them
and yields each complete line as a decoded message, keeping any trailing
partial line until the rest of it arrives. Splitting happens on bytes before
decoding so a multi-byte character cut by a chunk boundary is reassembled
intact.
"""

from __future__ import annotations

from collections.abc import Iterator

DELIMITER = b"\n"


class FrameReader:
    """Incremental splitter for newline-terminated messages.

    Example:
        >>> reader = FrameReader()
        >>> list(reader.feed(b'{"endpoint": "li'))
        []
        >>> list(reader.feed(b'stAll"}\\n{"endp'))
        ['{"endpoint": "listAll"}']
        >>> reader.pending
        6
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by a newline."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> Iterator[str]:
        """
        Append a chunk and return the messages it completes.

        The buffer is updated before this returns; only decoding of the
        completed lines is deferred to iteration.

        Args:
            chunk: Raw bytes from the transport

        Returns:
            Iterator over complete messages, in arrival order. Blank lines
            are included as empty strings.
        """
        self._buffer.extend(chunk)
        *complete, rest = self._buffer.split(DELIMITER)
        self._buffer = bytearray(rest)
        return (self._decode(line) for line in complete)

    def reset(self) -> bytes:
        """Discard and return any buffered partial message."""
        rest = bytes(self._buffer)
        self._buffer.clear()
        return rest

    def _decode(self, line: bytes) -> str:
        if line.endswith(b"\r"):
            line = line[:-1]
        return line.decode(self.encoding, errors="replace")
