import errno

import pytest

from gorillaos.console import (
    Console,
    DebugPort,
    FileDescriptor,
    KernelLogger,
    LogLevel,
    Vfs,
)
from gorillaos.kformat import format_printf
from gorillaos.vga import TextScreen


@pytest.fixture
def parts():
    screen = TextScreen()
    port = DebugPort()
    vfs = Vfs(screen, port)
    return screen, port, vfs, Console(vfs)


def test_debug_port_collects_text():
    port = DebugPort()
    for c in "abc":
        port.putc(c)
    assert port.text() == "abc"


def test_debug_port_rejects_strings():
    with pytest.raises(ValueError):
        DebugPort().putc("ab")


def test_vfs_stdout_writes_screen(parts):
    screen, port, vfs, _ = parts
    assert vfs.write(FileDescriptor.STDOUT, "hi") == 2
    assert screen.lines()[0] == "hi"
    assert port.text() == ""


def test_vfs_stderr_writes_screen(parts):
    screen, _, vfs, _ = parts
    assert vfs.write(FileDescriptor.STDERR, b"err") == 3
    assert screen.lines()[0] == "err"


def test_vfs_stdin_takes_nothing(parts):
    screen, port, vfs, _ = parts
    assert vfs.write(FileDescriptor.STDIN, "data") == 0
    assert screen.lines()[0] == ""
    assert port.text() == ""


def test_vfs_debug_writes_port(parts):
    screen, port, vfs, _ = parts
    assert vfs.write(3, "dbg") == 3
    assert port.text() == "dbg"
    assert screen.lines()[0] == ""


def test_vfs_bad_descriptor(parts):
    _, _, vfs, _ = parts
    with pytest.raises(OSError) as info:
        vfs.write(7, "x")
    assert info.value.errno == errno.EBADF


def test_printf_goes_to_screen(parts):
    screen, _, _, console = parts
    console.printf("Gorilla\n")
    console.printf("%s ready", "OS")
    assert screen.lines()[:2] == ["Gorilla", "OS ready"]


def test_debugf_matches_formatter(parts):
    _, port, _, console = parts
    console.debugf("irq %d %x %s", -3, 255, "x")
    assert port.text() == format_printf("irq %d %x %s", -3, 255, "x")


def test_fputs_stops_at_nul(parts):
    _, port, _, console = parts
    console.debugs("ab\0cd")
    assert port.text() == "ab"


def test_fputc_and_putc(parts):
    screen, port, _, console = parts
    console.debugc("q")
    console.putc("z")
    assert port.text() == "q"
    assert screen.char_at(0, 0) == "z"


def test_fputc_rejects_multiple_chars(parts):
    _, _, _, console = parts
    with pytest.raises(ValueError):
        console.fputc("ab", FileDescriptor.DEBUG)


def test_debug_buffer_hex(parts):
    _, port, _, console = parts
    console.debug_buffer("buf: ", b"\x01\xab")
    assert port.text() == "buf: 01ab\n"


def test_print_buffer_on_screen(parts):
    screen, _, _, console = parts
    console.print_buffer("m=", bytes([0xFF]))
    assert screen.lines()[0] == "m=ff"
    assert screen.y == 1


def test_fprintf_to_bad_descriptor(parts):
    _, _, _, console = parts
    with pytest.raises(OSError):
        console.fprintf(9, "x")


def test_logger_info_line(parts):
    _, port, _, console = parts
    KernelLogger(console).info("Main", "This is an info msg!")
    assert port.text() == "\033[37m[Main] This is an info msg!\033[0m\n"


def test_logger_critical_color(parts):
    _, port, _, console = parts
    KernelLogger(console).critical("ISR", "KERNEL PANIC!")
    assert port.text().startswith("\033[1;37;41m[ISR] KERNEL PANIC!")
    assert port.text().endswith("\033[0m\n")


def test_logger_formats_arguments(parts):
    _, port, _, console = parts
    KernelLogger(console).warn("PIC", "Unhandled IRQ %d...", 5)
    assert "[PIC] Unhandled IRQ 5..." in port.text()
    assert port.text().startswith("\033[1;33m")


def test_logger_filters_below_minimum(parts):
    _, port, _, console = parts
    logger = KernelLogger(console, LogLevel.WARN)
    logger.debug("Main", "hidden")
    logger.info("Main", "hidden")
    assert port.text() == ""
    logger.error("Main", "shown")
    assert port.text().startswith("\033[1;31m[Main] shown")


def test_logger_leaves_screen_alone(parts):
    screen, port, _, console = parts
    KernelLogger(console).debug("Main", "dbg")
    assert screen.lines()[0] == ""
    assert port.text().startswith("\033[2;37m")