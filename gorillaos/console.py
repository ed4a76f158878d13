"""Kernel console: file descriptors, the debug port, stdio and logging."""

from __future__ import annotations

import errno
from collections.abc import Iterable
from enum import IntEnum
from typing import Any

from gorillaos.kformat import format_printf, hex_dump
from gorillaos.vga import TextScreen


class FileDescriptor(IntEnum):
    """The fixed descriptors known to the kernel's virtual file system."""

    STDIN = 0
    STDOUT = 1
    STDERR = 2
    DEBUG = 3


class DebugPort:
    """The emulator debug port (0xE9): collects every character written to it."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    def putc(self, c: str) -> None:
        """Send one character to the port."""
        if len(c) != 1:
            raise ValueError("the debug port takes one character at a time")
        self._chars.append(c)

    def text(self) -> str:
        """Return everything written to the port so far."""
        return "".join(self._chars)


def _as_text(data: str | bytes | bytearray | memoryview) -> str:
    if isinstance(data, str):
        return data
    return bytes(data).decode("latin-1")


class Vfs:
    """Routes writes on a descriptor to the screen or the debug port."""

    def __init__(self, screen: TextScreen, debug_port: DebugPort) -> None:
        self.screen = screen
        self.debug_port = debug_port

    def write(self, fd: int, data: str | bytes | bytearray | memoryview) -> int:
        """Write ``data`` to ``fd`` and return how many characters were taken.

        Writing to standard input takes nothing; an unknown descriptor
        raises :class:`OSError` with ``EBADF``.
        """
        text = _as_text(data)
        if fd == FileDescriptor.STDIN:
            return 0
        if fd in (FileDescriptor.STDOUT, FileDescriptor.STDERR):
            for c in text:
                self.screen.putc(c)
            return len(text)
        if fd == FileDescriptor.DEBUG:
            for c in text:
                self.debug_port.putc(c)
            return len(text)
        raise OSError(errno.EBADF, f"bad file descriptor {fd}")


class Console:
    """The kernel's stdio functions on top of a :class:`Vfs`."""

    def __init__(self, vfs: Vfs) -> None:
        self.vfs = vfs

    def fputc(self, c: str, fd: int) -> None:
        if len(c) != 1:
            raise ValueError("fputc takes a single character")
        self.vfs.write(fd, c)

    def fputs(self, text: str, fd: int) -> None:
        """Write ``text`` up to its first NUL."""
        for c in text.split("\0", 1)[0]:
            self.fputc(c, fd)

    def fprintf(self, fd: int, fmt: str, *args: Any) -> None:
        for c in format_printf(fmt, *args):
            self.fputc(c, fd)

    def fprint_buffer(self, fd: int, msg: str, data: bytes | Iterable[int]) -> None:
        for c in hex_dump(msg, data):
            self.fputc(c, fd)

    def putc(self, c: str) -> None:
        self.fputc(c, FileDescriptor.STDOUT)

    def puts(self, text: str) -> None:
        self.fputs(text, FileDescriptor.STDOUT)

    def printf(self, fmt: str, *args: Any) -> None:
        self.fprintf(FileDescriptor.STDOUT, fmt, *args)

    def print_buffer(self, msg: str, data: bytes | Iterable[int]) -> None:
        self.fprint_buffer(FileDescriptor.STDOUT, msg, data)

    def debugc(self, c: str) -> None:
        self.fputc(c, FileDescriptor.DEBUG)

    def debugs(self, text: str) -> None:
        self.fputs(text, FileDescriptor.DEBUG)

    def debugf(self, fmt: str, *args: Any) -> None:
        self.fprintf(FileDescriptor.DEBUG, fmt, *args)

    def debug_buffer(self, msg: str, data: bytes | Iterable[int]) -> None:
        self.fprint_buffer(FileDescriptor.DEBUG, msg, data)


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    CRITICAL = 4


_LEVEL_COLORS = {
    LogLevel.DEBUG: "\033[2;37m",
    LogLevel.INFO: "\033[37m",
    LogLevel.WARN: "\033[1;33m",
    LogLevel.ERROR: "\033[1;31m",
    LogLevel.CRITICAL: "\033[1;37;41m",
}

_COLOR_RESET = "\033[0m"


class KernelLogger:
    """Writes coloured ``[module] message`` lines to the debug descriptor."""

    def __init__(self, console: Console, min_level: LogLevel = LogLevel.DEBUG) -> None:
        self.console = console
        self.min_level = LogLevel(min_level)

    def log(self, module: str, level: LogLevel, fmt: str, *args: Any) -> None:
        """Log one message if ``level`` is at least the minimum level."""
        level = LogLevel(level)
        if level < self.min_level:
            return
        fd = FileDescriptor.DEBUG
        self.console.fputs(_LEVEL_COLORS[level], fd)
        self.console.fprintf(fd, "[%s] ", module)
        self.console.fprintf(fd, fmt, *args)
        self.console.fputs(_COLOR_RESET, fd)
        self.console.fputc("\n", fd)

    def debug(self, module: str, fmt: str, *args: Any) -> None:
        self.log(module, LogLevel.DEBUG, fmt, *args)

    def info(self, module: str, fmt: str, *args: Any) -> None:
        self.log(module, LogLevel.INFO, fmt, *args)

    def warn(self, module: str, fmt: str, *args: Any) -> None:
        self.log(module, LogLevel.WARN, fmt, *args)

    def error(self, module: str, fmt: str, *args: Any) -> None:
        self.log(module, LogLevel.ERROR, fmt, *args)

    def critical(self, module: str, fmt: str, *args: Any) -> None:
        self.log(module, LogLevel.CRITICAL, fmt, *args)