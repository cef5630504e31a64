"""
Incremental line framing for event streams.

Network reads do not line up with frames: one read may end mid-line, or
carry several lines at once. ``LineFrameDecoder`` keeps the unterminated
tail between reads and hands back only complete lines.
"""

from __future__ import annotations

import codecs


class LineFrameDecoder:
    """Split a stream of text (or UTF-8 bytes) into complete ``\\n`` frames."""

    def __init__(self, encoding: str = "utf-8"):
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    @property
    def buffer(self) -> str:
        """Text after the last line terminator, not yet returned as a frame."""
        return self._buffer

    def feed(self, chunk: str | bytes) -> list[str]:
        """
        Append a chunk and return the frames it completed, in order.

        Bytes are decoded incrementally, so a multi-byte character split
        across two chunks is joined before framing. A trailing ``\\r`` is
        removed from each frame.
        """
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        if not chunk:
            return []

        *frames, self._buffer = (self._buffer + chunk).split("\n")
        return [frame.removesuffix("\r") for frame in frames]

    def reset(self) -> None:
        """Drop any buffered partial line."""
        self._buffer = ""
        self._decoder.reset()
