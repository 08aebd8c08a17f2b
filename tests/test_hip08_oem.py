import sqlite3
import struct

import pytest

from rasvendor.hip08_layout import parse_oem_type1, parse_oem_type2
from rasvendor.hip08_oem import (
    add_oem_type1_table,
    add_oem_type2_table,
    decode_oem_type1_error,
    decode_oem_type2_error,
    format_oem_type1_header,
    format_oem_type1_registers,
    format_oem_type2_header,
    format_oem_type2_registers,
)


def type1_bytes(val_bits, version=1, soc=2, socket=3, nimbus=4, module=1,
                sub=2, sev=1, misc=(0x10, 0x11, 0x12, 0x13, 0x14), addr=0x20):
    return struct.pack("<I8B5IQ", val_bits, version, soc, socket, nimbus,
                       module, sub, sev, 0, *misc, addr)


def type2_bytes(val_bits, module=4, sub=2, sev=2, regs=tuple(range(0x30, 0x3C))):
    return struct.pack("<I8B12I", val_bits, 1, 2, 3, 4, module, sub, sev, 0, *regs)


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def test_type1_header_all_fields():
    section = parse_oem_type1(type1_bytes(0x3F))
    text = format_oem_type1_header(section)
    assert text == ("[ table_version=1 SOC_ID=2 socket_ID=3 nimbus_ID=4 "
                    "module=PLL submodule=TB_PLL2 error_severity=fatal ]")


def test_type1_header_only_version():
    section = parse_oem_type1(type1_bytes(1 << 6))
    assert format_oem_type1_header(section) == "[ table_version=1 ]"


def test_type1_unknown_module():
    section = parse_oem_type1(type1_bytes(0x18, module=40))
    text = format_oem_type1_header(section)
    assert "module=unknown" in text
    assert "submodule=unknown" in text


def test_type1_registers_selected():
    section = parse_oem_type1(type1_bytes((1 << 6) | (1 << 11)))
    text = format_oem_type1_registers(section)
    assert text == "Reg Dump:\nERR_MISC0=0x10\nERR_ADDR=0x20\n"


def test_type2_header_module_with_subs():
    section = parse_oem_type2(type2_bytes(0x38))
    text = format_oem_type2_header(section)
    assert "module=DDRC" in text
    assert "submodule=TB_DDRC2" in text
    assert "error_severity=corrected" in text


def test_type2_module_without_subs_uses_own_name():
    section = parse_oem_type2(type2_bytes(0x18, module=2, sub=9))
    assert "submodule=PA" in format_oem_type2_header(section)


def test_type2_registers_pairs():
    section = parse_oem_type2(type2_bytes(1 << 6))
    text = format_oem_type2_registers(section)
    assert text == "Reg Dump:\nERR_FR_0=0x30\nERR_FR_1=0x31\n"


def test_decode_type1_zero_val_bits_raises():
    with pytest.raises(ValueError, match="no valid error information"):
        decode_oem_type1_error(type1_bytes(0), "ts")


def test_decode_type2_zero_val_bits_raises():
    with pytest.raises(ValueError, match="no valid error information"):
        decode_oem_type2_error(type2_bytes(0), "ts")


def test_decode_truncated_raises():
    with pytest.raises(ValueError):
        decode_oem_type1_error(b"\x01\x00", "ts")


def test_decode_type1_text():
    text = decode_oem_type1_error(type1_bytes(0x21 | (1 << 7)), "ts")
    assert text.startswith("\nHISI HIP08: OEM Type-1 Error\n[ table_version=1 SOC_ID=2")
    assert text.endswith("Reg Dump:\nERR_MISC1=0x11\n")


def test_decode_type1_records_row(connection):
    record = add_oem_type1_table(connection)
    decode_oem_type1_error(type1_bytes(0x3F | (1 << 6) | (1 << 11)),
                           "2024-01-01 00:00:00 +0000", record)
    row = connection.execute(
        "SELECT timestamp, version, soc_id, socket_id, nimbus_id, module_id, "
        "sub_module_id, err_severity, regs_dump FROM hip08_oem_type1_event_v2"
    ).fetchone()
    assert row == ("2024-01-01 00:00:00 +0000", 1, 2, 3, 4, "PLL", "TB_PLL2",
                   "fatal", "ERR_MISC0=0x10 ERR_ADDR=0x20")


def test_decode_type2_records_row(connection):
    record = add_oem_type2_table(connection)
    decode_oem_type2_error(type2_bytes(0x08 | (1 << 7)), "ts", record)
    rows = connection.execute(
        "SELECT timestamp, module_id, regs_dump FROM hip08_oem_type2_event_v2"
    ).fetchall()
    assert rows == [("ts", "DDRC", "ERR_CTRL_0=0x32 ERR_CTRL_1=0x33")]


def test_add_tables_without_connection():
    assert add_oem_type1_table(None) is None
    assert add_oem_type2_table(None) is None


def test_recording_does_not_change_text(connection):
    data = type1_bytes(0x3F | (1 << 8))
    record = add_oem_type1_table(connection)
    assert decode_oem_type1_error(data, "ts", record) == decode_oem_type1_error(data, "ts")