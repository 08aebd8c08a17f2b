import sqlite3
import struct

import pytest

from rasvendor.hip08_layout import parse_pcie_local
from rasvendor.hip08_pcie import (
    add_pcie_local_table,
    decode_pcie_local_error,
    format_pcie_local_header,
    format_pcie_local_registers,
)

_LAYOUT = struct.Struct("<Q8BH2x33I")


def make_section(val_bits, version=1, soc_id=2, socket_id=1, nimbus_id=0,
                 sub_module_id=0, core_id=3, port_id=5, severity=1,
                 err_type=0x1F, misc=None):
    misc = list(misc) if misc is not None else [0x100 + i for i in range(33)]
    return _LAYOUT.pack(val_bits, version, soc_id, socket_id, nimbus_id,
                        sub_module_id, core_id, port_id, severity, err_type, *misc)


ALL_HEADER_BITS = 0x1FF


def test_header_all_fields():
    section = parse_pcie_local(make_section(ALL_HEADER_BITS))
    text = format_pcie_local_header(section)
    assert text.startswith("[ table_version=1 ")
    assert text.endswith(" ]")
    assert "SOC_ID=2" in text
    assert "socket_ID=1" in text
    assert "submodule=AP_Layer" in text
    assert "core_ID=core3" in text
    assert "port_ID=port5" in text
    assert "error_severity=fatal" in text
    assert f"error_type=0x{0x1F:x}" in text


def test_header_only_version():
    section = parse_pcie_local(make_section(1, version=7))
    assert format_pcie_local_header(section) == "[ table_version=7 ]"


def test_header_unknown_submodule():
    section = parse_pcie_local(make_section(ALL_HEADER_BITS, sub_module_id=9))
    assert "submodule=unknown" in format_pcie_local_header(section)


def test_registers_selected_by_bits():
    bits = (1 << 9) | (1 << (9 + 32))
    section = parse_pcie_local(make_section(bits))
    text = format_pcie_local_registers(section)
    assert text.splitlines() == [
        "Reg Dump:",
        f"ERR_MISC_0=0x{0x100:x}",
        f"ERR_MISC_32=0x{0x100 + 32:x}",
    ]


def test_registers_none_valid():
    section = parse_pcie_local(make_section(ALL_HEADER_BITS))
    assert format_pcie_local_registers(section) == "Reg Dump:\n"


def test_decode_report_structure():
    report = decode_pcie_local_error(make_section(ALL_HEADER_BITS | (1 << 10)), "ts")
    lines = report.splitlines()
    assert lines[0] == ""
    assert lines[1] == "HISI HIP08: PCIe local error"
    assert lines[2].startswith("[ table_version=")
    assert lines[3] == "Reg Dump:"
    assert lines[4].startswith("ERR_MISC_1=")


def test_decode_rejects_no_valid_bits():
    with pytest.raises(ValueError):
        decode_pcie_local_error(make_section(0), "ts")


def test_decode_rejects_truncated():
    with pytest.raises(ValueError):
        decode_pcie_local_error(make_section(1)[:20], "ts")


def test_add_table_without_connection():
    assert add_pcie_local_table(None) is None


def test_decode_records_row():
    connection = sqlite3.connect(":memory:")
    record = add_pcie_local_table(connection)
    bits = ALL_HEADER_BITS | (1 << 9) | (1 << 11)
    decode_pcie_local_error(make_section(bits), "2024-01-01 00:00:00 +0000", record)
    row = connection.execute(
        "SELECT timestamp, version, soc_id, sub_module_id, core_id, port_id, "
        "err_severity, err_type, regs_dump FROM hip08_pcie_local_event_v2"
    ).fetchone()
    assert row == (
        "2024-01-01 00:00:00 +0000", 1, 2, "AP_Layer", 3, 5, "fatal", 0x1F,
        f"ERR_MISC_0=0x{0x100:x} ERR_MISC_2=0x{0x102:x}",
    )