"""Command that lists a directory or prints a file from a FAT12 disk image."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator, Sequence
from itertools import islice
from typing import TextIO

from gorillaos.disk import DiskError, DiskImage
from gorillaos.fat import DirectoryEntry, FatError, FatFile, FatFileSystem

MAX_LISTED_ENTRIES = 10
READ_CHUNK = 100


def _entries(fs: FatFileSystem, directory: FatFile) -> Iterator[DirectoryEntry]:
    while (entry := fs.read_entry(directory)) is not None:
        yield entry


def _list_directory(fs: FatFileSystem, directory: FatFile, out: TextIO) -> None:
    for entry in islice(_entries(fs, directory), MAX_LISTED_ENTRIES):
        out.write("  " + entry.name.decode("latin-1") + "\r\n")


def _dump_file(fs: FatFileSystem, file: FatFile, out: TextIO) -> None:
    for chunk in iter(lambda: fs.read(file, READ_CHUNK), b""):
        out.write(chunk.decode("latin-1"))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command; return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "gorillaos-fat"
        print(f"Syntax: {prog} <image> <file_path>", file=sys.stderr)
        return 1
    image_path, file_path = args[0], args[1]

    try:
        disk = DiskImage(image_path)
    except DiskError:
        print("Disk init error", file=sys.stderr)
        return 1

    with disk:
        try:
            fs = FatFileSystem(disk)
        except FatError:
            print("FAT init error", file=sys.stderr)
            return 1

        try:
            file = fs.open(file_path)
        except FatError as exc:
            print(f"FAT: {exc}", file=sys.stderr)
            return 1

        try:
            if file.is_directory:
                _list_directory(fs, file, sys.stdout)
            else:
                _dump_file(fs, file, sys.stdout)
        finally:
            fs.close(file)

    sys.stdout.flush()
    return 0