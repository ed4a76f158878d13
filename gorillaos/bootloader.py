"""Second-stage boot loading: the boot-time FAT reader and kernel loading."""

from __future__ import annotations

from gorillaos.disk import DiskImage
from gorillaos.fat import FatFile, FatFileSystem

MEMORY_MIN = 0x00000500
MEMORY_MAX = 0x00080000

MEMORY_FAT_ADDR = 0x20000
MEMORY_FAT_SIZE = 0x00010000

MEMORY_LOAD_KERNEL = 0x30000
MEMORY_LOAD_SIZE = 0x00010000

MEMORY_KERNEL_ADDR = 0x100000

KERNEL_PATH = "/kernel.bin"


class BootFatFileSystem(FatFileSystem):
    """The loader's FAT reader.

    It differs from the tool's reader in one rule: a directory that has a
    recorded size, such as the root directory, is also read no further
    than that size.
    """

    def __init__(self, disk: DiskImage) -> None:
        super().__init__(disk)

    def read(self, file: FatFile, count: int) -> bytes:
        if file.is_directory and file.size != 0:
            count = min(count, max(file.size - file.position, 0))
        return super().read(file, count)


def load_kernel(
    fs: FatFileSystem, path: str = KERNEL_PATH, chunk_size: int = MEMORY_LOAD_SIZE
) -> bytes:
    """Read the kernel image at ``path`` in ``chunk_size`` pieces and return it."""
    if chunk_size <= 0:
        raise ValueError("chunk size must be positive")
    file = fs.open(path)
    try:
        return b"".join(iter(lambda: fs.read(file, chunk_size), b""))
    finally:
        fs.close(file)