"""A read-only FAT12 file system driver over a sector-addressed disk."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Protocol

from gorillaos.disk import SECTOR_SIZE, DiskError

MAX_FILE_HANDLES = 10
ROOT_DIRECTORY_HANDLE = -1
MEMORY_FAT_SIZE = 0x10000
END_OF_CHAIN = 0xFF8

_ENTRY = struct.Struct("<11sBBBHHHHHHHI")
_BOOT = struct.Struct("<3s8sHBHBHHBHHHIIBBBI11s8s")

# Size of the driver's bookkeeping area: the boot sector copy plus one
# record (public part, flags, cluster state and sector buffer) for the
# root directory and for each file handle.
_FILE_DATA_SIZE = 16 + 4 + 12 + SECTOR_SIZE
_FAT_DATA_SIZE = SECTOR_SIZE + _FILE_DATA_SIZE * (MAX_FILE_HANDLES + 1)

DIRECTORY_ENTRY_SIZE = _ENTRY.size


class FatError(Exception):
    """Raised when the file system cannot be read or a path is invalid."""


class _SectorReader(Protocol):
    def read_sectors(self, lba: int, count: int) -> bytes: ...


class Attribute(IntFlag):
    READ_ONLY = 0x01
    HIDDEN = 0x02
    SYSTEM = 0x04
    VOLUME_ID = 0x08
    DIRECTORY = 0x10
    ARCHIVE = 0x20
    LFN = READ_ONLY | HIDDEN | SYSTEM | VOLUME_ID


@dataclass(frozen=True)
class DirectoryEntry:
    """One 32-byte directory entry."""

    name: bytes
    attributes: int
    reserved: int = 0
    created_time_tenths: int = 0
    created_time: int = 0
    created_date: int = 0
    accessed_date: int = 0
    first_cluster_high: int = 0
    modified_time: int = 0
    modified_date: int = 0
    first_cluster_low: int = 0
    size: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> DirectoryEntry:
        if len(data) < _ENTRY.size:
            raise FatError(f"directory entry needs {_ENTRY.size} bytes, got {len(data)}")
        return cls(*_ENTRY.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _ENTRY.pack(
            self.name,
            self.attributes,
            self.reserved,
            self.created_time_tenths,
            self.created_time,
            self.created_date,
            self.accessed_date,
            self.first_cluster_high,
            self.modified_time,
            self.modified_date,
            self.first_cluster_low,
            self.size,
        )

    @property
    def first_cluster(self) -> int:
        return self.first_cluster_low + (self.first_cluster_high << 16)

    @property
    def is_directory(self) -> bool:
        return bool(self.attributes & Attribute.DIRECTORY)


@dataclass(frozen=True)
class BootSector:
    """The BIOS parameter block and extended boot record."""

    boot_jump_instruction: bytes
    oem_identifier: bytes
    bytes_per_sector: int
    sectors_per_cluster: int
    reserved_sectors: int
    fat_count: int
    dir_entry_count: int
    total_sectors: int
    media_descriptor_type: int
    sectors_per_fat: int
    sectors_per_track: int
    heads: int
    hidden_sectors: int
    large_sector_count: int
    drive_number: int
    reserved: int
    signature: int
    volume_id: int
    volume_label: bytes
    system_id: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> BootSector:
        if len(data) < _BOOT.size:
            raise FatError(f"boot sector needs {_BOOT.size} bytes, got {len(data)}")
        return cls(*_BOOT.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _BOOT.pack(
            self.boot_jump_instruction,
            self.oem_identifier,
            self.bytes_per_sector,
            self.sectors_per_cluster,
            self.reserved_sectors,
            self.fat_count,
            self.dir_entry_count,
            self.total_sectors,
            self.media_descriptor_type,
            self.sectors_per_fat,
            self.sectors_per_track,
            self.heads,
            self.hidden_sectors,
            self.large_sector_count,
            self.drive_number,
            self.reserved,
            self.signature,
            self.volume_id,
            self.volume_label,
            self.system_id,
        )


@dataclass(eq=False)
class FatFile:
    """An open file or directory and its read state."""

    handle: int
    is_directory: bool
    position: int
    size: int
    first_cluster: int = 0
    current_cluster: int = 0
    current_sector_in_cluster: int = 0
    buffer: bytes = field(default=bytes(SECTOR_SIZE), repr=False)
    at_end: bool = False


def is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def to_upper(ch: str) -> str:
    """Upper-case an ASCII letter; leave everything else unchanged."""
    return chr(ord(ch) - ord("a") + ord("A")) if is_lower(ch) else ch


def to_fat_name(name: str) -> bytes:
    """Convert ``name.ext`` to the space-padded 11-byte 8.3 form."""
    base, dot, ext = name.partition(".")
    chars = [" "] * 11
    for i, ch in enumerate(base[:8]):
        chars[i] = to_upper(ch)
    if dot:
        for i, ch in enumerate(ext[:3]):
            chars[8 + i] = to_upper(ch)
    try:
        return "".join(chars).encode("latin-1")
    except UnicodeEncodeError as exc:
        raise FatError(f"name {name!r} cannot be stored in a FAT directory") from exc


class FatFileSystem:
    """A FAT12 volume read through a sector reader such as a disk image."""

    def __init__(self, disk: _SectorReader) -> None:
        self.disk = disk
        try:
            raw = disk.read_sectors(0, 1)
        except DiskError as exc:
            raise FatError("read boot sector failed") from exc
        self.boot_sector = bs = BootSector.from_bytes(raw)
        if bs.bytes_per_sector == 0:
            raise FatError("invalid boot sector: zero bytes per sector")

        fat_size = bs.bytes_per_sector * bs.sectors_per_fat
        required = _FAT_DATA_SIZE + fat_size
        if required >= MEMORY_FAT_SIZE:
            raise FatError(
                f"not enough memory to read FAT! Required {required}, only have {MEMORY_FAT_SIZE}"
            )
        try:
            fat = disk.read_sectors(bs.reserved_sectors, bs.sectors_per_fat)
        except DiskError as exc:
            raise FatError("read FAT failed") from exc
        self._fat = bytes(fat) + bytes(SECTOR_SIZE)

        self.root_lba = bs.reserved_sectors + bs.sectors_per_fat * bs.fat_count
        root_size = DIRECTORY_ENTRY_SIZE * bs.dir_entry_count
        try:
            root_buffer = self._read_sector(self.root_lba)
        except DiskError as exc:
            raise FatError("read root directory failed") from exc
        self.root = FatFile(
            handle=ROOT_DIRECTORY_HANDLE,
            is_directory=True,
            position=0,
            size=root_size,
            first_cluster=self.root_lba,
            current_cluster=self.root_lba,
            buffer=root_buffer,
        )

        root_sectors = -(-root_size // bs.bytes_per_sector)
        self.data_section_lba = self.root_lba + root_sectors
        self._open_files: list[FatFile | None] = [None] * MAX_FILE_HANDLES

    def _read_sector(self, lba: int) -> bytes:
        return self.disk.read_sectors(lba, 1)[:SECTOR_SIZE]

    def cluster_to_lba(self, cluster: int) -> int:
        return self.data_section_lba + (cluster - 2) * self.boot_sector.sectors_per_cluster

    def next_cluster(self, cluster: int) -> int:
        """Return the FAT12 entry that follows ``cluster`` in its chain."""
        index = cluster * 3 // 2
        value = int.from_bytes(self._fat[index:index + 2].ljust(2, b"\0"), "little")
        return value & 0x0FFF if cluster % 2 == 0 else value >> 4

    def open_entry(self, entry: DirectoryEntry) -> FatFile:
        """Open the file described by ``entry`` on a free handle."""
        handle = next((i for i, f in enumerate(self._open_files) if f is None), None)
        if handle is None:
            raise FatError("out of file handles")
        first = entry.first_cluster
        try:
            buffer = self._read_sector(self.cluster_to_lba(first))
        except DiskError as exc:
            raise FatError(f"read error opening {entry.name!r}") from exc
        file = FatFile(
            handle=handle,
            is_directory=entry.is_directory,
            position=0,
            size=entry.size,
            first_cluster=first,
            current_cluster=first,
            buffer=buffer,
        )
        self._open_files[handle] = file
        return file

    def _advance(self, file: FatFile) -> None:
        """Load the sector that follows the one just consumed."""
        if file.handle == ROOT_DIRECTORY_HANDLE:
            file.current_cluster += 1
            lba = file.current_cluster
        else:
            file.current_sector_in_cluster += 1
            if file.current_sector_in_cluster >= self.boot_sector.sectors_per_cluster:
                file.current_sector_in_cluster = 0
                file.current_cluster = self.next_cluster(file.current_cluster)
            if file.current_cluster >= END_OF_CHAIN:
                file.size = file.position
                file.at_end = True
                return
            lba = self.cluster_to_lba(file.current_cluster) + file.current_sector_in_cluster
        try:
            file.buffer = self._read_sector(lba)
        except DiskError:
            file.at_end = True

    def read(self, file: FatFile, count: int) -> bytes:
        """Read up to ``count`` bytes from ``file`` at its current position.

        Regular files stop at their size; directories run until their
        cluster chain ends or the disk can no longer be read.
        """
        if not file.is_directory:
            count = min(count, max(file.size - file.position, 0))
        out = bytearray()
        while count > 0 and not file.at_end:
            offset = file.position % SECTOR_SIZE
            left = SECTOR_SIZE - offset
            take = min(count, left)
            out += file.buffer[offset:offset + take]
            file.position += take
            count -= take
            if take == left:
                self._advance(file)
        return bytes(out)

    def read_entry(self, file: FatFile) -> DirectoryEntry | None:
        """Read the next directory entry, or ``None`` when none is left."""
        data = self.read(file, DIRECTORY_ENTRY_SIZE)
        if len(data) != DIRECTORY_ENTRY_SIZE:
            return None
        return DirectoryEntry.from_bytes(data)

    def close(self, file: FatFile) -> None:
        """Rewind the root directory, or release the handle of any other file."""
        if file.handle == ROOT_DIRECTORY_HANDLE:
            file.position = 0
            file.current_cluster = file.first_cluster
            file.at_end = False
            try:
                file.buffer = self._read_sector(file.first_cluster)
            except DiskError:
                file.at_end = True
        elif self._open_files[file.handle] is file:
            self._open_files[file.handle] = None

    def find_file(self, file: FatFile, name: str) -> DirectoryEntry | None:
        """Scan directory ``file`` for ``name``; ``None`` if it is not there."""
        fat_name = to_fat_name(name)
        while (entry := self.read_entry(file)) is not None:
            if entry.name == fat_name:
                return entry
        return None

    def open(self, path: str) -> FatFile:
        """Open the file at ``path``, walking directories from the root."""
        rest = path[1:] if path.startswith("/") else path
        current = self.root
        while rest:
            name, sep, rest = rest.partition("/")
            is_last = not sep
            entry = self.find_file(current, name)
            self.close(current)
            if entry is None:
                raise FatError(f"{name} not found")
            if not is_last and not entry.is_directory:
                raise FatError(f"{name} not a directory")
            current = self.open_entry(entry)
        return current