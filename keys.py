"""Decode raw terminal bytes into key names.

Printable bytes come back as one-character strings (``chr(byte)``), everything
else as a name in the ``ctrl+a`` / ``alt+left`` style.
"""

from __future__ import annotations

from typing import Protocol

ESC = 0x1B
DEL = 0x7F
BS = 0x08

# CSI modifier parameters that mean "move by word": Alt (3), Ctrl (5), Meta (9).
_WORD_MODIFIERS = {"1;3", "1;5", "1;9", "3", "5", "9"}
_ARROWS = {ord("A"): "up", ord("B"): "down", ord("C"): "right", ord("D"): "left"}


class ByteSource(Protocol):
    def read_byte(self) -> int: ...

    def has_pending(self, timeout: float = ...) -> bool: ...


def split_key(key_value: str) -> tuple[str, set[str]]:
    parts = key_value.split("+")
    key_name = parts[-1].lower()
    modifiers = {part.lower() for part in parts[:-1] if part}
    return key_name, modifiers


def is_printable(key: str) -> bool:
    return len(key) == 1 and ord(key) >= 0x20 and ord(key) != DEL


def _control_key(byte: int) -> str:
    if byte in (0x0D, 0x0A):
        return "enter"
    if byte in (DEL, BS):
        return "backspace"
    if byte == 0x09:
        return "tab"
    if 0x01 <= byte <= 0x1A:
        return f"ctrl+{chr(byte + 0x60)}"
    return "unknown"


def _read_csi(source: ByteSource) -> str:
    params = ""
    while True:
        byte = source.read_byte()
        if chr(byte) in "0123456789;":
            params += chr(byte)
            continue
        break
    if byte in _ARROWS:
        name = _ARROWS[byte]
        if not params:
            return name
        if params in _WORD_MODIFIERS and name in ("left", "right"):
            return f"alt+{name}"
        return "unknown"
    return "unknown"


def read_key(source: ByteSource) -> str:
    """Read one logical key; raises ``EOFError`` when input ends."""
    byte = source.read_byte()
    if byte != ESC:
        if byte >= 0x20 and byte != DEL:
            return chr(byte)
        return _control_key(byte)

    if not source.has_pending():
        return "escape"
    follow = source.read_byte()
    if follow == ord("["):
        return _read_csi(source)
    if follow == ord("O"):
        return _ARROWS.get(source.read_byte(), "unknown")
    if follow == ord("b"):
        return "alt+left"
    if follow == ord("f"):
        return "alt+right"
    if follow in (DEL, BS):
        return "alt+backspace"
    if follow == ESC:
        # Some terminals send ESC ESC [ D for Option+Left.
        if source.has_pending():
            key = _read_escaped(source)
            if key in ("left", "right"):
                return f"alt+{key}"
            return key
        return "escape"
    return "unknown"


def _read_escaped(source: ByteSource) -> str:
    follow = source.read_byte()
    if follow == ord("["):
        return _read_csi(source)
    return "unknown"
