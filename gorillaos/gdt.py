"""The i686 global descriptor table: entry encoding and the kernel's table."""

from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum

CODE_SEGMENT = 0x08
DATA_SEGMENT = 0x10

_ENTRY = struct.Struct("<HHBBBB")


class Access(IntEnum):
    """Bits of a descriptor's access byte."""

    CODE_READABLE = 0x02
    DATA_WRITEABLE = 0x02

    CODE_CONFORMING = 0x04
    DATA_DIRECTION_NORMAL = 0x00
    DATA_DIRECTION_DOWN = 0x04

    DATA_SEGMENT = 0x10
    CODE_SEGMENT = 0x18

    DESCRIPTOR_TSS = 0x00

    RING0 = 0x00
    RING1 = 0x20
    RING2 = 0x40
    RING3 = 0x60

    PRESENT = 0x80


class GdtFlag(IntEnum):
    """Bits of the flags nibble of a descriptor."""

    BIT64 = 0x20
    BIT32 = 0x40
    BIT16 = 0x00

    GRANULARITY_1B = 0x00
    GRANULARITY_4K = 0x80


@dataclass(frozen=True)
class GdtEntry:
    """One 8-byte segment descriptor, field by field."""

    limit_low: int
    base_low: int
    base_middle: int
    access: int
    flags_limit_hi: int
    base_high: int

    def to_bytes(self) -> bytes:
        return _ENTRY.pack(
            self.limit_low,
            self.base_low,
            self.base_middle,
            self.access,
            self.flags_limit_hi,
            self.base_high,
        )


def gdt_entry(base: int, limit: int, access: int, flags: int) -> GdtEntry:
    """Encode a segment with a 32-bit ``base`` and a 20-bit ``limit``."""
    if not 0 <= base <= 0xFFFFFFFF:
        raise ValueError(f"segment base {base:#x} does not fit in 32 bits")
    if not 0 <= limit <= 0xFFFFF:
        raise ValueError(f"segment limit {limit:#x} does not fit in 20 bits")
    return GdtEntry(
        limit_low=limit & 0xFFFF,
        base_low=base & 0xFFFF,
        base_middle=(base >> 16) & 0xFF,
        access=access & 0xFF,
        flags_limit_hi=((limit >> 16) & 0xF) | (flags & 0xF0),
        base_high=(base >> 24) & 0xFF,
    )


def default_gdt() -> list[GdtEntry]:
    """The kernel's flat table: null, 32-bit ring 0 code, 32-bit ring 0 data."""
    flags = GdtFlag.BIT32 | GdtFlag.GRANULARITY_4K
    return [
        gdt_entry(0, 0, 0, 0),
        gdt_entry(
            0,
            0xFFFFF,
            Access.PRESENT | Access.RING0 | Access.CODE_SEGMENT | Access.CODE_READABLE,
            flags,
        ),
        gdt_entry(
            0,
            0xFFFFF,
            Access.PRESENT | Access.RING0 | Access.DATA_SEGMENT | Access.DATA_WRITEABLE,
            flags,
        ),
    ]


def pack_table(entries: Iterable[GdtEntry]) -> bytes:
    """Lay the entries out one after another as the CPU reads them."""
    return b"".join(entry.to_bytes() for entry in entries)