import struct

import pytest

from factorio_settings import ByteCursor, TruncatedError


def test_reads_are_little_endian():
    cursor = ByteCursor(bytes.fromhex("01 0201 04030201") + struct.pack("<d", 1.5) + b"abc")

    assert cursor.read_u8() == 0x01
    assert cursor.read_u16() == 0x0102
    assert cursor.read_u32() == 0x01020304
    assert cursor.read_f64() == 1.5
    assert cursor.read_bytes(3) == b"abc"
    assert cursor.remaining() == 0
    assert cursor.position == 18


def test_writes_append_in_order():
    cursor = ByteCursor()
    cursor.write_u8(0xff)
    cursor.write_u16(0x0102)
    cursor.write_u32(0xff)
    cursor.write_f64(-2.0)
    cursor.write_bytes(b"xy")

    assert cursor.getvalue() == (bytes.fromhex("ff 0201 ff000000") + struct.pack("<d", -2.0) + b"xy")


@pytest.mark.parametrize("method, size", [
    ("read_u8", 1),
    ("read_u16", 2),
    ("read_u32", 4),
    ("read_f64", 8),
])
def test_short_read_raises_truncated(method, size):
    cursor = ByteCursor(b"\x00" * (size + 1))
    cursor.read_u8()
    cursor.read_u8()

    with pytest.raises(TruncatedError) as info:
        getattr(cursor, method)()

    assert info.value.offset == 2
    assert info.value.wanted == size
    assert info.value.available == size - 1


def test_failed_read_does_not_advance():
    cursor = ByteCursor(b"abc")

    with pytest.raises(TruncatedError):
        cursor.read_bytes(4)

    assert cursor.position == 0
    assert cursor.read_bytes(3) == b"abc"
