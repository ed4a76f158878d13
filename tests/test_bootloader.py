import pytest

from gorillaos.bootloader import BootFatFileSystem, load_kernel
from gorillaos.disk import DiskImage
from gorillaos.fat import Attribute, BootSector, DirectoryEntry, FatError, FatFileSystem

SECTOR = 512
KERNEL = bytes(range(256)) * 5


def _set_fat12(fat, cluster, value):
    index = cluster * 3 // 2
    word = int.from_bytes(fat[index:index + 2], "little")
    if cluster % 2 == 0:
        word = (word & 0xF000) | value
    else:
        word = (word & 0x000F) | (value << 4)
    fat[index:index + 2] = word.to_bytes(2, "little")


def _make_image(path):
    fat = bytearray(SECTOR)
    _set_fat12(fat, 0, 0xFF0)
    _set_fat12(fat, 1, 0xFFF)
    sectors = []

    def store(content):
        first = 2 + len(sectors)
        chunks = [content[i:i + SECTOR] for i in range(0, max(len(content), 1), SECTOR)]
        for n, chunk in enumerate(chunks):
            cluster = first + n
            _set_fat12(fat, cluster, cluster + 1 if n < len(chunks) - 1 else 0xFFF)
            sectors.append(chunk.ljust(SECTOR, b"\0"))
        return first

    def entry(name, content, attributes=Attribute.ARCHIVE, size=None):
        return DirectoryEntry(
            name=name,
            attributes=attributes,
            first_cluster_low=store(content),
            size=len(content) if size is None else size,
        ).to_bytes()

    inner = entry(b"NOTE    TXT", b"boot note")
    root = [
        entry(b"KERNEL  BIN", KERNEL),
        entry(b"SUB        ", inner, Attribute.DIRECTORY, size=0),
    ]
    boot = BootSector(
        boot_jump_instruction=b"\xeb\x3c\x90",
        oem_identifier=b"MSWIN4.1",
        bytes_per_sector=SECTOR,
        sectors_per_cluster=1,
        reserved_sectors=1,
        fat_count=2,
        dir_entry_count=16,
        total_sectors=4 + len(sectors),
        media_descriptor_type=0xF0,
        sectors_per_fat=1,
        sectors_per_track=18,
        heads=2,
        hidden_sectors=0,
        large_sector_count=0,
        drive_number=0,
        reserved=0,
        signature=0x29,
        volume_id=1,
        volume_label=b"TESTVOLUME ",
        system_id=b"FAT12   ",
    ).to_bytes().ljust(SECTOR, b"\0")
    image = boot + bytes(fat) * 2 + b"".join(root).ljust(SECTOR, b"\0") + b"".join(sectors)
    path.write_bytes(image)
    return path


@pytest.fixture
def disk(tmp_path):
    with DiskImage(_make_image(tmp_path / "boot.img")) as image:
        yield image


def test_load_kernel_default_path(disk):
    fs = BootFatFileSystem(disk)
    assert load_kernel(fs) == KERNEL


@pytest.mark.parametrize("chunk", [1, 100, SECTOR, 10_000])
def test_load_kernel_any_chunk_size(disk, chunk):
    fs = BootFatFileSystem(disk)
    assert load_kernel(fs, "/kernel.bin", chunk) == KERNEL


def test_load_kernel_releases_handle(disk):
    fs = BootFatFileSystem(disk)
    for _ in range(12):
        assert load_kernel(fs) == KERNEL


def test_root_directory_read_is_bounded_by_its_size(disk):
    fs = BootFatFileSystem(disk)
    data = fs.read(fs.root, 10_000)
    assert len(data) == fs.boot_sector.dir_entry_count * 32
    assert fs.read(fs.root, 10_000) == b""


def test_tool_reader_runs_past_root_directory(disk):
    boot_len = len(BootFatFileSystem(disk).read(BootFatFileSystem(disk).root, 10_000))
    tool = FatFileSystem(disk)
    assert len(tool.read(tool.root, 10_000)) > boot_len


def test_sized_zero_directory_reads_until_chain_end(disk):
    fs = BootFatFileSystem(disk)
    sub = fs.open("/sub")
    data = fs.read(sub, 10_000)
    assert len(data) == SECTOR
    assert DirectoryEntry.from_bytes(data).name == b"NOTE    TXT"


def test_nested_file_through_boot_reader(disk):
    fs = BootFatFileSystem(disk)
    assert load_kernel(fs, "/sub/note.txt") == b"boot note"


def test_missing_kernel_raises(disk):
    fs = BootFatFileSystem(disk)
    with pytest.raises(FatError):
        load_kernel(fs, "/nokernel.bin")


def test_non_positive_chunk_rejected(disk):
    fs = BootFatFileSystem(disk)
    with pytest.raises(ValueError):
        load_kernel(fs, chunk_size=0)