"""Line input with in-place editing and recall.

On a real terminal each ``read_line`` runs in raw mode and edits a byte
buffer key by key. Anything else (pipes, files, ``StringIO`` in tests) is read
one newline-terminated line at a time. Both paths return the same text.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
import logging
import sys
from typing import IO, Optional

from rich.cells import cell_len

from errors import IOFailure, TerminalUnavailable
from keys import ByteSource, is_printable, read_key, split_key
from rawterm import FdByteSource, disable_raw_mode, enable_raw_mode, is_terminal, stream_fd

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 500
SPACE = 0x20


class InputHistory:
    """Bounded list of past lines with a recall cursor."""

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._entries: deque[str] = deque(maxlen=max(max_size, 1))
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, line: str) -> None:
        if not line:
            return
        if self._entries and self._entries[-1] == line:
            return
        self._entries.append(line)
        self.reset()

    def prev(self) -> Optional[str]:
        if not self._entries:
            return None
        if self._cursor > 0:
            self._cursor -= 1
        return self._entries[self._cursor]

    def next(self) -> Optional[str]:
        """Step forward; ``""`` means the caller is back on its fresh line."""
        if not self._entries:
            return None
        if self._cursor < len(self._entries):
            self._cursor += 1
        if self._cursor >= len(self._entries):
            return ""
        return self._entries[self._cursor]

    def reset(self) -> None:
        self._cursor = len(self._entries)


class EditStatus(Enum):
    CONTINUE = "continue"
    SUBMIT = "submit"
    EOF = "eof"


class LineEditor:
    """Byte buffer plus cursor, driven one key at a time."""

    def __init__(self, history: Optional[InputHistory] = None, initial: str = "") -> None:
        self.history = history
        self.buffer = bytearray(initial.encode("utf-8"))
        self.cursor = len(self.buffer)
        self._draft: Optional[bytes] = None

    @property
    def text(self) -> str:
        return self.buffer.decode("utf-8", errors="replace")

    @property
    def tail(self) -> str:
        return self.buffer[self.cursor :].decode("utf-8", errors="replace")

    def _replace(self, data: bytes) -> None:
        self.buffer = bytearray(data)
        self.cursor = len(self.buffer)

    def _word_left(self) -> int:
        pos = self.cursor
        while pos > 0 and self.buffer[pos - 1] == SPACE:
            pos -= 1
        while pos > 0 and self.buffer[pos - 1] != SPACE:
            pos -= 1
        return pos

    def _word_right(self) -> int:
        pos = self.cursor
        while pos < len(self.buffer) and self.buffer[pos] != SPACE:
            pos += 1
        while pos < len(self.buffer) and self.buffer[pos] == SPACE:
            pos += 1
        return pos

    def _recall(self, forward: bool) -> None:
        if self.history is None:
            return
        if not forward and self._draft is None:
            self._draft = bytes(self.buffer)
        entry = self.history.next() if forward else self.history.prev()
        if entry is None:
            return
        if forward and entry == "":
            # Down without a prior Up leaves the line being typed alone.
            if self._draft is None:
                return
            self._replace(self._draft)
            self._draft = None
            return
        self._replace(entry.encode("utf-8"))

    def feed(self, key: str) -> EditStatus:
        if is_printable(key):
            self.buffer.insert(self.cursor, ord(key) & 0xFF)
            self.cursor += 1
            return EditStatus.CONTINUE

        name, modifiers = split_key(key)
        if "alt" in modifiers:
            if name == "left":
                self.cursor = self._word_left()
            elif name == "right":
                self.cursor = self._word_right()
            elif name == "backspace":
                start = self._word_left()
                del self.buffer[start : self.cursor]
                self.cursor = start
            return EditStatus.CONTINUE

        if key == "enter":
            return EditStatus.SUBMIT
        if key == "backspace":
            if self.cursor > 0:
                del self.buffer[self.cursor - 1]
                self.cursor -= 1
        elif key == "ctrl+c":
            self._replace(b"")
        elif key == "ctrl+d":
            if not self.buffer:
                return EditStatus.EOF
        elif key == "ctrl+a":
            self.cursor = 0
        elif key == "ctrl+e":
            self.cursor = len(self.buffer)
        elif key == "ctrl+k":
            del self.buffer[self.cursor :]
        elif key == "ctrl+u":
            del self.buffer[: self.cursor]
            self.cursor = 0
        elif key == "up":
            self._recall(forward=False)
        elif key == "down":
            self._recall(forward=True)
        elif key == "left":
            if self.cursor > 0:
                self.cursor -= 1
        elif key == "right":
            if self.cursor < len(self.buffer):
                self.cursor += 1
        return EditStatus.CONTINUE


class LineReader:
    """Reads prompted lines from a terminal or any text stream."""

    def __init__(
        self,
        in_stream: Optional[IO] = None,
        out_stream: Optional[IO[str]] = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        self.in_stream = in_stream if in_stream is not None else sys.stdin
        self.out_stream = out_stream if out_stream is not None else sys.stdout
        self.history = InputHistory(history_size)
        self.interactive = is_terminal(self.in_stream)
        self._fd = stream_fd(self.in_stream) if self.interactive else None

    def read_line(self, prompt: str) -> str:
        """Return one line without its newline; raises ``EOFError`` at end of input."""
        if self.interactive:
            return self._read_interactive(prompt)
        return self._read_buffered(prompt)

    def _write(self, text: str) -> None:
        self.out_stream.write(text)
        self.out_stream.flush()

    def _read_buffered(self, prompt: str) -> str:
        self._write(prompt)
        try:
            line = self.in_stream.readline()
        except OSError as exc:
            raise IOFailure(str(exc)) from exc
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        if not line:
            raise EOFError
        # A last line without a newline is still a line; the next read hits EOF.
        return line.rstrip("\r\n")

    def _read_interactive(self, prompt: str) -> str:
        try:
            original = enable_raw_mode(self._fd)
        except TerminalUnavailable as exc:
            logger.warning("falling back to line-buffered input: %s", exc)
            self.interactive = False
            return self._read_buffered(prompt)
        try:
            return self.edit_line(prompt, FdByteSource(self._fd))
        finally:
            disable_raw_mode(self._fd, original)

    def edit_line(self, prompt: str, source: ByteSource) -> str:
        """Run the editing loop over ``source`` (already in raw mode)."""
        self.history.reset()
        editor = LineEditor(self.history)
        self._write(prompt)
        while True:
            status = editor.feed(read_key(source))
            if status is EditStatus.SUBMIT:
                self._write("\r\n")
                line = editor.text
                self.history.add(line)
                return line
            if status is EditStatus.EOF:
                self._write("\r\n")
                raise EOFError
            self._redraw(prompt, editor)

    def _redraw(self, prompt: str, editor: LineEditor) -> None:
        back = cell_len(editor.tail)
        move = f"\x1b[{back}D" if back else ""
        self._write(f"\r\x1b[K{prompt}{editor.text}{move}")
