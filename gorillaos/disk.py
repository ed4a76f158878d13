"""Sector-level access to disk images."""

from __future__ import annotations

import os
from typing import BinaryIO

SECTOR_SIZE = 512


class DiskError(Exception):
    """Raised when a disk image cannot be opened or read."""


class DiskImage:
    """A read-only disk image addressed by 512-byte sectors."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = os.fspath(path)
        try:
            self._file: BinaryIO = open(self.path, "rb")
        except OSError as exc:
            raise DiskError(f"cannot open disk image {self.path!r}: {exc.strerror}") from exc

    def read_sectors(self, lba: int, count: int) -> bytes:
        """Read ``count`` sectors starting at ``lba``.

        Returns the whole sectors that could be read; raises
        :class:`DiskError` if not even one full sector was available.
        """
        if self._file.closed:
            raise DiskError("disk image is closed")
        if lba < 0 or count < 0:
            raise DiskError(f"invalid sector range: lba={lba} count={count}")
        self._file.seek(lba * SECTOR_SIZE)
        data = self._file.read(count * SECTOR_SIZE)
        whole = len(data) // SECTOR_SIZE * SECTOR_SIZE
        if whole == 0:
            raise DiskError(f"cannot read sector {lba} of {self.path!r}")
        return data[:whole]

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> DiskImage:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def lba_to_chs(lba: int, sectors_per_track: int, heads: int) -> tuple[int, int, int]:
    """Convert a logical block address to ``(cylinder, sector, head)``.

    Sectors are numbered from 1, cylinders and heads from 0.
    """
    if sectors_per_track <= 0 or heads <= 0:
        raise ValueError("sectors per track and heads must be positive")
    track, index = divmod(lba, sectors_per_track)
    cylinder, head = divmod(track, heads)
    return cylinder, index + 1, head