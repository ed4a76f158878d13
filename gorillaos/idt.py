"""The i686 interrupt descriptor table."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

IDT_SIZE = 256

_ENTRY = struct.Struct("<HHBBH")


class IdtFlag(IntEnum):
    """Gate types, privilege levels and the present bit of a gate."""

    GATE_TASK = 0x5
    GATE_16BIT_INT = 0x6
    GATE_16BIT_TRAP = 0x7
    GATE_32BIT_INT = 0xE
    GATE_32BIT_TRAP = 0xF

    RING0 = 0 << 5
    RING1 = 1 << 5
    RING2 = 2 << 5
    RING3 = 3 << 5

    PRESENT = 0x80


@dataclass
class IdtEntry:
    """One 8-byte interrupt gate."""

    base_low: int = 0
    segment_selector: int = 0
    reserved: int = 0
    flags: int = 0
    base_high: int = 0

    def to_bytes(self) -> bytes:
        return _ENTRY.pack(
            self.base_low, self.segment_selector, self.reserved, self.flags, self.base_high
        )

    @property
    def base(self) -> int:
        return self.base_low | (self.base_high << 16)

    @property
    def present(self) -> bool:
        return bool(self.flags & IdtFlag.PRESENT)


class InterruptDescriptorTable:
    """All 256 gates, initially empty and not present."""

    def __init__(self) -> None:
        self._entries = [IdtEntry() for _ in range(IDT_SIZE)]

    def _entry(self, interrupt: int) -> IdtEntry:
        if not 0 <= interrupt < IDT_SIZE:
            raise IndexError(f"interrupt {interrupt} is outside 0-{IDT_SIZE - 1}")
        return self._entries[interrupt]

    def set_gate(self, interrupt: int, base: int, segment: int, flags: int) -> None:
        """Point gate ``interrupt`` at handler address ``base`` in ``segment``."""
        if not 0 <= base <= 0xFFFFFFFF:
            raise ValueError(f"handler address {base:#x} does not fit in 32 bits")
        if not 0 <= segment <= 0xFFFF:
            raise ValueError(f"segment selector {segment:#x} does not fit in 16 bits")
        if not 0 <= flags <= 0xFF:
            raise ValueError(f"gate flags {flags:#x} do not fit in a byte")
        entry = self._entry(interrupt)
        entry.base_low = base & 0xFFFF
        entry.segment_selector = segment
        entry.reserved = 0
        entry.flags = flags
        entry.base_high = (base >> 16) & 0xFFFF

    def enable_gate(self, interrupt: int) -> None:
        self._entry(interrupt).flags |= IdtFlag.PRESENT

    def disable_gate(self, interrupt: int) -> None:
        self._entry(interrupt).flags &= ~IdtFlag.PRESENT & 0xFF

    def __getitem__(self, interrupt: int) -> IdtEntry:
        return self._entry(interrupt)

    def __len__(self) -> int:
        return IDT_SIZE

    def to_bytes(self) -> bytes:
        """The table laid out as the CPU reads it."""
        return b"".join(entry.to_bytes() for entry in self._entries)