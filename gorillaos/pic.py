"""Driver for the cascaded Intel 8259 programmable interrupt controllers."""

from __future__ import annotations

from enum import IntEnum, IntFlag

from gorillaos.ports import PortBus

PIC1_COMMAND_PORT = 0x20
PIC1_DATA_PORT = 0x21
PIC2_COMMAND_PORT = 0xA0
PIC2_DATA_PORT = 0xA1

IRQ_LINES = 16
ALL_MASKED = 0xFFFF
PROBE_MASK = 0x1337


class Icw1(IntFlag):
    """Initialization control word 1."""

    ICW4 = 0x01
    SINGLE = 0x02
    INTERVAL4 = 0x04
    LEVEL = 0x08
    INITIALIZE = 0x10


class Icw4(IntFlag):
    """Initialization control word 4."""

    MODE_8086 = 0x01
    AUTO_EOI = 0x02
    BUFFER_MASTER = 0x04
    BUFFER_SLAVE = 0x00
    BUFFERED = 0x08
    SFNM = 0x10


class PicCommand(IntEnum):
    END_OF_INTERRUPT = 0x20
    READ_IRR = 0x0A
    READ_ISR = 0x0B


# ICW3 values: the master has its slave on IRQ2, the slave's cascade identity is 2.
_ICW3_MASTER = 0x4
_ICW3_SLAVE = 0x2


def _check_irq(irq: int) -> None:
    if not 0 <= irq < IRQ_LINES:
        raise ValueError(f"IRQ {irq} is outside 0-{IRQ_LINES - 1}")


class I8259:
    """A master/slave pair of 8259 PICs on an I/O port bus."""

    name = "8259 PIC"

    def __init__(self, bus: PortBus) -> None:
        self.bus = bus
        self._mask = ALL_MASKED
        self.auto_eoi = False

    def _send(self, port: int, value: int) -> None:
        self.bus.outb(port, value)
        self.bus.iowait()

    def set_mask(self, mask: int) -> None:
        """Write the 16-bit interrupt mask, low byte to the master."""
        if not 0 <= mask <= 0xFFFF:
            raise ValueError(f"mask {mask:#x} does not fit in 16 bits")
        self._mask = mask
        self._send(PIC1_DATA_PORT, mask & 0xFF)
        self._send(PIC2_DATA_PORT, mask >> 8)

    def get_mask(self) -> int:
        """Read the 16-bit interrupt mask back from both controllers."""
        return self.bus.inb(PIC1_DATA_PORT) | (self.bus.inb(PIC2_DATA_PORT) << 8)

    def configure(self, offset1: int, offset2: int, auto_eoi: bool = False) -> None:
        """Remap the controllers to vector offsets and leave every line masked."""
        self.set_mask(ALL_MASKED)

        self._send(PIC1_COMMAND_PORT, Icw1.ICW4 | Icw1.INITIALIZE)
        self._send(PIC2_COMMAND_PORT, Icw1.ICW4 | Icw1.INITIALIZE)

        self._send(PIC1_DATA_PORT, offset1)
        self._send(PIC2_DATA_PORT, offset2)

        self._send(PIC1_DATA_PORT, _ICW3_MASTER)
        self._send(PIC2_DATA_PORT, _ICW3_SLAVE)

        icw4 = Icw4.MODE_8086
        if auto_eoi:
            icw4 |= Icw4.AUTO_EOI
        self._send(PIC1_DATA_PORT, icw4)
        self._send(PIC2_DATA_PORT, icw4)

        self.set_mask(ALL_MASKED)

    def send_end_of_interrupt(self, irq: int) -> None:
        """Acknowledge ``irq``; lines of the slave are acknowledged on both chips."""
        _check_irq(irq)
        if irq >= 8:
            self.bus.outb(PIC2_COMMAND_PORT, PicCommand.END_OF_INTERRUPT)
        self.bus.outb(PIC1_COMMAND_PORT, PicCommand.END_OF_INTERRUPT)

    def disable(self) -> None:
        self.set_mask(ALL_MASKED)

    def mask(self, irq: int) -> None:
        _check_irq(irq)
        self.set_mask(self._mask | (1 << irq))

    def unmask(self, irq: int) -> None:
        _check_irq(irq)
        self.set_mask(self._mask & ~(1 << irq) & 0xFFFF)

    def _read_register(self, command: PicCommand) -> int:
        self.bus.outb(PIC1_COMMAND_PORT, command)
        self.bus.outb(PIC2_COMMAND_PORT, command)
        # Both bytes are taken from the slave's command port.
        low = self.bus.inb(PIC2_COMMAND_PORT)
        high = self.bus.inb(PIC2_COMMAND_PORT)
        return low | (high << 8)

    def read_irq_request_register(self) -> int:
        return self._read_register(PicCommand.READ_IRR)

    def read_in_service_register(self) -> int:
        return self._read_register(PicCommand.READ_ISR)

    def probe(self) -> bool:
        """Check that a mask written to the controllers reads back unchanged."""
        self.disable()
        self.set_mask(PROBE_MASK)
        return self.get_mask() == PROBE_MASK