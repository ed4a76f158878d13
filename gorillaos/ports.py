"""Simulated byte-wide x86 I/O ports."""

from __future__ import annotations

UNUSED_PORT = 0x80
FLOATING_BUS = 0xFF


def _check_port(port: int) -> None:
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"I/O port {port:#x} is outside 0x0000-0xffff")


def _check_byte(value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"value {value:#x} does not fit in a byte")


class PortBus:
    """An I/O port space in which every port latches the last byte it held.

    Every ``outb`` is recorded in :attr:`writes`. ``inb`` returns the byte
    last written to or set on a port, and ``0xFF`` for a port never used.
    """

    def __init__(self) -> None:
        self.writes: list[tuple[int, int]] = []
        self._latched: dict[int, int] = {}

    def outb(self, port: int, value: int) -> None:
        """Write one byte to ``port``."""
        _check_port(port)
        _check_byte(value)
        self.writes.append((port, value))
        self._latched[port] = value

    def inb(self, port: int) -> int:
        """Read one byte from ``port``."""
        _check_port(port)
        return self._latched.get(port, FLOATING_BUS)

    def iowait(self) -> None:
        """Give slow devices time to settle by writing to an unused port."""
        self.outb(UNUSED_PORT, 0)

    def set_input(self, port: int, value: int) -> None:
        """Make ``port`` read ``value`` without recording a write."""
        _check_port(port)
        _check_byte(value)
        self._latched[port] = value