import pytest

from gorillaos.idt import IDT_SIZE, IdtFlag, InterruptDescriptorTable

GATE = IdtFlag.RING0 | IdtFlag.GATE_32BIT_INT


def test_new_table_is_empty():
    idt = InterruptDescriptorTable()
    assert idt.to_bytes() == bytes(8 * IDT_SIZE)
    assert len(idt) == IDT_SIZE


def test_set_gate_splits_the_address():
    idt = InterruptDescriptorTable()
    idt.set_gate(0x21, 0x12345678, 0x08, GATE | IdtFlag.PRESENT)
    entry = idt[0x21]
    assert entry.base == 0x12345678
    assert entry.segment_selector == 0x08
    assert entry.reserved == 0
    assert entry.to_bytes() == bytes.fromhex("78560800008e3412")


def test_gate_lands_at_its_offset_in_table():
    idt = InterruptDescriptorTable()
    idt.set_gate(5, 0xC0DE, 0x08, GATE)
    raw = idt.to_bytes()
    assert raw[5 * 8:6 * 8] == idt[5].to_bytes()
    assert raw[:5 * 8] == bytes(5 * 8)


def test_enable_and_disable_only_touch_present_bit():
    idt = InterruptDescriptorTable()
    idt.set_gate(3, 0x1000, 0x08, GATE)
    assert not idt[3].present
    idt.enable_gate(3)
    assert idt[3].present
    assert idt[3].flags == GATE | IdtFlag.PRESENT
    idt.disable_gate(3)
    assert not idt[3].present
    assert idt[3].flags == GATE


def test_enable_is_idempotent():
    idt = InterruptDescriptorTable()
    idt.enable_gate(0x80)
    idt.enable_gate(0x80)
    assert idt[0x80].flags == IdtFlag.PRESENT


@pytest.mark.parametrize("interrupt", [-1, IDT_SIZE])
def test_out_of_range_interrupt(interrupt):
    idt = InterruptDescriptorTable()
    with pytest.raises(IndexError):
        idt[interrupt]
    with pytest.raises(IndexError):
        idt.enable_gate(interrupt)


@pytest.mark.parametrize(
    "base, segment, flags", [(1 << 32, 8, 0), (0, 0x10000, 0), (0, 8, 0x100), (-1, 8, 0)]
)
def test_invalid_gate_values(base, segment, flags):
    idt = InterruptDescriptorTable()
    with pytest.raises(ValueError):
        idt.set_gate(0, base, segment, flags)
    assert idt[0].to_bytes() == bytes(8)