"""Raw-mode terminal control and single-byte input."""

from __future__ import annotations

from contextlib import contextmanager
import io
import logging
import os
import select
from typing import IO, Iterator, Optional

from errors import IOFailure, TerminalUnavailable

try:
    import termios
except ImportError:  # pragma: no cover - non-POSIX platforms
    termios = None

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (24, 80)
# How long to wait after a lone ESC before treating it as the Escape key.
ESCAPE_TIMEOUT = 0.05


def stream_fd(stream: object) -> Optional[int]:
    """Return the descriptor behind ``stream``, or None for in-memory streams."""
    fileno = getattr(stream, "fileno", None)
    if fileno is None:
        return None
    try:
        return fileno()
    except (OSError, ValueError, io.UnsupportedOperation):
        return None


def is_terminal(stream: object) -> bool:
    fd = stream_fd(stream)
    if fd is None or termios is None:
        return False
    try:
        termios.tcgetattr(fd)
    except termios.error:
        return False
    return True


def enable_raw_mode(fd: Optional[int]) -> list:
    """Switch ``fd`` to byte-at-a-time input and return the previous settings."""
    if termios is None:
        raise TerminalUnavailable("raw mode not supported on this platform")
    if fd is None:
        raise TerminalUnavailable("input is not a terminal")
    try:
        original = termios.tcgetattr(fd)
    except termios.error as exc:
        raise TerminalUnavailable(str(exc)) from exc

    raw = [list(value) if isinstance(value, list) else value for value in original]
    iflag, oflag, cflag, lflag = 0, 1, 2, 3
    raw[iflag] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    raw[oflag] &= ~termios.OPOST
    raw[cflag] |= termios.CS8
    raw[lflag] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    raw[6][termios.VMIN] = 1
    raw[6][termios.VTIME] = 0
    try:
        termios.tcsetattr(fd, termios.TCSANOW, raw)
    except termios.error as exc:
        raise TerminalUnavailable(str(exc)) from exc
    logger.debug("raw mode enabled on fd %d", fd)
    return original


def disable_raw_mode(fd: int, original: list) -> None:
    if termios is None:
        raise TerminalUnavailable("raw mode not supported on this platform")
    try:
        termios.tcsetattr(fd, termios.TCSADRAIN, original)
    except termios.error as exc:
        raise TerminalUnavailable(str(exc)) from exc


@contextmanager
def raw_mode(fd: Optional[int]) -> Iterator[None]:
    original = enable_raw_mode(fd)
    try:
        yield
    finally:
        disable_raw_mode(fd, original)


def term_size(fd: Optional[int]) -> tuple[int, int]:
    """Return ``(rows, cols)`` for ``fd``, or 24x80 when unknown."""
    if fd is None:
        return DEFAULT_SIZE
    try:
        size = os.get_terminal_size(fd)
    except (OSError, ValueError):
        return DEFAULT_SIZE
    if size.lines == 0 or size.columns == 0:
        return DEFAULT_SIZE
    return size.lines, size.columns


class FdByteSource:
    """Reads one byte at a time straight from a file descriptor."""

    def __init__(self, fd: int) -> None:
        self.fd = fd

    def read_byte(self) -> int:
        try:
            data = os.read(self.fd, 1)
        except OSError as exc:
            raise IOFailure(str(exc)) from exc
        if not data:
            raise EOFError
        return data[0]

    def has_pending(self, timeout: float = ESCAPE_TIMEOUT) -> bool:
        try:
            ready, _, _ = select.select([self.fd], [], [], timeout)
        except (OSError, ValueError):
            return False
        return bool(ready)


def write_raw(out: IO[str], text: str) -> None:
    out.write(text)
    out.flush()
