# gorillaos

A Python model of a small i686 hobby operating system and the tooling around
it. It includes:

- the kernel's text screen, console and `printf`;
- the kernel's coloured logger;
- the global and interrupt descriptor tables;
- the 8259 interrupt controller, driven over a simulated I/O port bus;
- a read-only FAT12 reader for disk images, in the tool's and the bootloader's variants.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Reading a FAT12 disk image

`gorillaos-fat` takes a disk image and a path inside that image:

```
gorillaos-fat disk.img /
gorillaos-fat disk.img /kernel.bin
```

What the command does depends on the path:

- For a directory, it prints up to ten of the directory's raw 11-character entry names. Each name is indented by two spaces.
- For a file, it writes the file's bytes to standard output, decoded as Latin-1.

On failure it prints one of these messages to standard error and exits with status 1:

- `Disk init error`
- `FAT init error`
- `FAT: <name> not found`
- `FAT: <name> not a directory`

You can do the same from Python:

```python
from gorillaos.disk import DiskImage
from gorillaos.fat import FatFileSystem

with DiskImage("disk.img") as disk:
    fs = FatFileSystem(disk)
    f = fs.open("/kernel.bin")
    data = fs.read(f, 4096)
    fs.close(f)
```

Errors are reported by exception:

- `DiskImage` raises `DiskError`.
- `FatFileSystem` raises `FatError`.

`FatFileSystem` has ten file handles. The root directory is always open.

`to_fat_name` converts plain 8.3 names to the on-disk form. For example, `to_fat_name("kernel.bin")` gives `b"KERNEL  BIN"`.

`lba_to_chs(lba, sectors_per_track, heads)` in `gorillaos.disk` converts a block address to `(cylinder, sector, head)`.

### The bootloader's reader

The bootloader's variant of the reader is `gorillaos.bootloader.BootFatFileSystem`. It differs from `FatFileSystem` in one way: it also limits directories that have a size, such as the root directory, to that size.

`load_kernel(fs, path="/kernel.bin", chunk_size=0x10000)` reads a whole file in chunks and returns its bytes.

## The console

```python
from gorillaos.vga import TextScreen
from gorillaos.console import Console, DebugPort, KernelLogger, LogLevel, Vfs

screen = TextScreen(80, 25, 0x7)
port = DebugPort()
console = Console(Vfs(screen, port))

console.printf("%s has %d bytes free (0x%x)\n", "heap", 4096, 4096)
print(screen.lines()[0])

log = KernelLogger(console, LogLevel.INFO)
log.warn("Main", "unhandled IRQ %d", 3)
print(repr(port.text()))
```

### Screen and descriptors

`TextScreen` keeps a character and a colour for each cell. It handles newline, tab and carriage return, wraps at the right edge, and scrolls when it reaches the bottom.

`Vfs` routes writes by `FileDescriptor`:

| Descriptor | Where writes go |
| --- | --- |
| `STDOUT`, `STDERR` | the screen |
| `DEBUG` | the `DebugPort` |
| `STDIN` | nothing is taken |

Writing to any other descriptor raises `OSError` with `EBADF`.

### Logging

`KernelLogger` writes lines of the form `[module] message` to the debug descriptor. Each line is wrapped in an ANSI colour for its level. Messages below the minimum level are dropped.

### Formatting

`format_printf` in `gorillaos.kformat` uses the kernel's small `printf` dialect:

- It supports the conversions `%c %s %d %i %u %x %X %p %o %%`.
- It supports the length prefixes `h`, `hh`, `l` and `ll`.
- Hex digits are always lowercase.
- Unknown conversions print nothing.

`hex_dump(msg, data)` returns the message, then the bytes as lowercase hex, then a newline.

## Hardware models

| Module | What it models |
| --- | --- |
| `gorillaos.ports` | `PortBus`: records every `outb`; `inb` returns the last byte written or set, or `0xFF` |
| `gorillaos.gdt` | `gdt_entry`, the flat kernel table from `default_gdt`, and `pack_table` |
| `gorillaos.idt` | `InterruptDescriptorTable`: 256 gates, `set_gate`, `enable_gate`/`disable_gate`, `to_bytes` |
| `gorillaos.pic` | `I8259`: remapping, masks, end-of-interrupt and `probe`, all through a `PortBus` |

## What it does not do

- It does not dispatch interrupts. Nothing routes a CPU exception or an IRQ to a handler, and there is no hardware abstraction layer that sets up the screen, tables and PIC in one step.
- The descriptor tables and the PIC are data and port traffic only.
- `load_kernel` returns the kernel's bytes. It does not run them.
- The FAT reader is read-only. It understands FAT12 only.