"""Minimal printf-style formatting as done by the kernel's console code."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum, auto
from typing import Any

_RADIX_FORMAT = {10: "d", 16: "x", 8: "o"}


class _State(Enum):
    NORMAL = auto()
    LENGTH = auto()
    LENGTH_SHORT = auto()
    LENGTH_LONG = auto()
    SPEC = auto()


class _Length(Enum):
    DEFAULT = auto()
    SHORT_SHORT = auto()
    SHORT = auto()
    LONG = auto()
    LONG_LONG = auto()


# On i686 ``int`` and ``long`` are 32 bits wide, ``long long`` is 64.
_ARG_BITS = {
    _Length.DEFAULT: 32,
    _Length.SHORT_SHORT: 32,
    _Length.SHORT: 32,
    _Length.LONG: 32,
    _Length.LONG_LONG: 64,
}

# spec -> (radix, signed)
_NUMBER_SPECS = {
    "d": (10, True),
    "i": (10, True),
    "u": (10, False),
    "X": (16, False),
    "x": (16, False),
    "p": (16, False),
    "o": (8, False),
}

_MISSING = object()


def _cstr(text: str) -> str:
    """Cut a string at its first NUL, as a C string would end there."""
    return text.split("\0", 1)[0]


def _next_arg(args: Iterator[Any], spec: str) -> Any:
    value = next(args, _MISSING)
    if value is _MISSING:
        raise TypeError(f"not enough arguments for format spec '%{spec}'")
    return value


def _format_number(value: Any, radix: int, signed: bool, bits: int) -> str:
    number = int(value) & ((1 << bits) - 1)
    if signed and number >= 1 << (bits - 1):
        number -= 1 << bits
    digits = format(abs(number), _RADIX_FORMAT[radix])
    return "-" + digits if number < 0 else digits


def _format_char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("'%c' expects a single character or an integer")
        return value
    return chr(int(value) & 0xFF)


def _convert(spec: str, length: _Length, args: Iterator[Any]) -> str:
    if spec == "c":
        return _format_char(_next_arg(args, spec))
    if spec == "s":
        return _cstr(str(_next_arg(args, spec)))
    if spec == "%":
        return "%"
    if spec in _NUMBER_SPECS:
        radix, signed = _NUMBER_SPECS[spec]
        return _format_number(_next_arg(args, spec), radix, signed, _ARG_BITS[length])
    # Unknown specifiers are silently ignored and consume no argument.
    return ""


def format_printf(fmt: str, *args: Any) -> str:
    """Format ``fmt`` with the kernel printf rules and return the text.

    Supports ``%c %s %% %d %i %u %x %X %p %o`` with the ``hh``, ``h``,
    ``l`` and ``ll`` length modifiers. Hex digits are always lower case,
    unknown specifiers print nothing, and a trailing ``%`` is dropped.
    """
    out: list[str] = []
    arg_iter = iter(args)
    state = _State.NORMAL
    length = _Length.DEFAULT

    for ch in _cstr(fmt):
        if state is _State.NORMAL:
            if ch == "%":
                state = _State.LENGTH
            else:
                out.append(ch)
            continue

        if state is _State.LENGTH:
            if ch == "h":
                length, state = _Length.SHORT, _State.LENGTH_SHORT
                continue
            if ch == "l":
                length, state = _Length.LONG, _State.LENGTH_LONG
                continue
        elif state is _State.LENGTH_SHORT:
            if ch == "h":
                length, state = _Length.SHORT_SHORT, _State.SPEC
                continue
        elif state is _State.LENGTH_LONG:
            if ch == "l":
                length, state = _Length.LONG_LONG, _State.SPEC
                continue

        out.append(_convert(ch, length, arg_iter))
        state = _State.NORMAL
        length = _Length.DEFAULT

    return "".join(out)


def hex_dump(msg: str, data: bytes | bytearray | memoryview | Iterable[int]) -> str:
    """Return ``msg`` followed by ``data`` as lower-case hex and a newline."""
    return _cstr(msg) + bytes(data).hex() + "\n"