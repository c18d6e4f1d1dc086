"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing for arrows, paging, and function keys.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

# ESC [ <number> ~ sequences.
_TILDE_KEYS: dict[bytes, str] = {
    b"1": "HOME",
    b"2": "INSERT",
    b"3": "DELETE",
    b"4": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
    b"7": "HOME",
    b"8": "END",
    b"11": "F1",
    b"12": "F2",
    b"13": "F3",
    b"14": "F4",
    b"15": "F5",
    b"17": "F6",
    b"18": "F7",
    b"19": "F8",
    b"20": "F9",
    b"21": "F10",
}

# ESC [ <letter> and ESC O <letter> sequences.
_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"P": "F1",
    b"Q": "F2",
    b"R": "F3",
    b"S": "F4",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_tilde_sequence(fd: int, first: bytes) -> str:
    digits = first
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if part == b"~":
            return _TILDE_KEYS.get(digits, "ESC")
        if part == b";":
            # Modified key (e.g. ESC [ 1 ; 5 H); report the plain key.
            modifier = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if modifier is None or final is None:
                return "ESC"
            if final == b"~":
                return _TILDE_KEYS.get(digits, "ESC")
            return _FINAL_KEYS.get(final, "ESC")
        if not part.isdigit() or len(digits) > 3:
            return "ESC"
        digits += part


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token; ``""`` when ``timeout_ms`` passes without input."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch == b"\t":
        return "TAB"
    if ch in {b"\x08", b"\x7f"}:
        return "BACKSPACE"
    if ch in {b"\r", b"\n"}:
        return "ENTER"
    if ch == b" ":
        return "SPACE"
    if ch == b"\x03":
        return "CTRL_C"
    if ch == b"\x12":
        return "CTRL_R"

    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _FINAL_KEYS.get(final, "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq.isdigit():
        return _read_tilde_sequence(fd, seq)
    return _FINAL_KEYS.get(seq, "ESC")


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
