"""Decoder for the HIP08 PCIe local error section."""

from __future__ import annotations

import sqlite3
from enum import IntEnum

from .hip08_layout import (
    BUF_LEN,
    PCIE_LOCAL_ERR_MISC_MAX,
    PCIE_LOCAL_VALID_CORE_ID,
    PCIE_LOCAL_VALID_ERR_MISC,
    PCIE_LOCAL_VALID_ERR_SEVERITY,
    PCIE_LOCAL_VALID_ERR_TYPE,
    PCIE_LOCAL_VALID_NIMBUS_ID,
    PCIE_LOCAL_VALID_PORT_ID,
    PCIE_LOCAL_VALID_SOC_ID,
    PCIE_LOCAL_VALID_SOCKET_ID,
    PCIE_LOCAL_VALID_SUB_MODULE_ID,
    PcieLocalSection,
    parse_pcie_local,
    pcie_local_submodule_name,
)
from .recording import TableSpec, Value, VendorRecord, err_severity


class PcieField(IntEnum):
    """Column positions of the PCIe local table."""

    ID = 0
    TIMESTAMP = 1
    VERSION = 2
    SOC_ID = 3
    SOCKET_ID = 4
    NIMBUS_ID = 5
    SUB_MODULE_ID = 6
    CORE_ID = 7
    PORT_ID = 8
    ERR_SEV = 9
    ERR_TYPE = 10
    REGS_DUMP = 11


PCIE_LOCAL_TABLE = TableSpec(
    "hip08_pcie_local_event_v2",
    (
        ("id", "INTEGER PRIMARY KEY"),
        ("timestamp", "TEXT"),
        ("version", "INTEGER"),
        ("soc_id", "INTEGER"),
        ("socket_id", "INTEGER"),
        ("nimbus_id", "INTEGER"),
        ("sub_module_id", "TEXT"),
        ("core_id", "INTEGER"),
        ("port_id", "INTEGER"),
        ("err_severity", "TEXT"),
        ("err_type", "INTEGER"),
        ("regs_dump", "TEXT"),
    ),
)


def _bind(record: VendorRecord | None, index: int, value: Value) -> None:
    if record is not None:
        record.bind(index, value)


def _clip(text: str) -> str:
    return text[: BUF_LEN - 1]


def add_pcie_local_table(connection: sqlite3.Connection | None) -> VendorRecord | None:
    """Create the PCIe local table; return None when not recording."""
    if connection is None:
        return None
    return PCIE_LOCAL_TABLE.create(connection)


def format_pcie_local_header(section: PcieLocalSection,
                             record: VendorRecord | None = None) -> str:
    """Describe a PCIe local header, binding its fields into ``record``."""
    bits = section.val_bits
    parts = [f"table_version={section.version}"]
    _bind(record, PcieField.VERSION, section.version)

    for bit, label, value, column in (
        (PCIE_LOCAL_VALID_SOC_ID, "SOC_ID", section.soc_id, PcieField.SOC_ID),
        (PCIE_LOCAL_VALID_SOCKET_ID, "socket_ID", section.socket_id,
         PcieField.SOCKET_ID),
        (PCIE_LOCAL_VALID_NIMBUS_ID, "nimbus_ID", section.nimbus_id,
         PcieField.NIMBUS_ID),
    ):
        if bits & bit:
            parts.append(f"{label}={value}")
            _bind(record, column, value)

    if bits & PCIE_LOCAL_VALID_SUB_MODULE_ID:
        name = pcie_local_submodule_name(section.sub_module_id)
        parts.append(f"submodule={name}")
        _bind(record, PcieField.SUB_MODULE_ID, name)

    if bits & PCIE_LOCAL_VALID_CORE_ID:
        parts.append(f"core_ID=core{section.core_id}")
        _bind(record, PcieField.CORE_ID, section.core_id)

    if bits & PCIE_LOCAL_VALID_PORT_ID:
        parts.append(f"port_ID=port{section.port_id}")
        _bind(record, PcieField.PORT_ID, section.port_id)

    if bits & PCIE_LOCAL_VALID_ERR_SEVERITY:
        severity = err_severity(section.err_severity)
        parts.append(f"error_severity={severity}")
        _bind(record, PcieField.ERR_SEV, severity)

    if bits & PCIE_LOCAL_VALID_ERR_TYPE:
        parts.append(f"error_type=0x{section.err_type:x}")
        _bind(record, PcieField.ERR_TYPE, section.err_type)

    return _clip("[ " + " ".join(parts) + " ]")


def format_pcie_local_registers(section: PcieLocalSection,
                                record: VendorRecord | None = None) -> str:
    """Describe the valid ERR_MISC registers; store the row when recording."""
    entries = [
        f"ERR_MISC_{index}=0x{value:x}"
        for index, value in enumerate(section.err_misc[:PCIE_LOCAL_ERR_MISC_MAX])
        if section.val_bits & (1 << (PCIE_LOCAL_VALID_ERR_MISC + index))
    ]
    if record is not None:
        record.bind(PcieField.REGS_DUMP, _clip(" ".join(entries)))
        record.step("hip08_pcie_local_event_tab")
    return "Reg Dump:\n" + "".join(f"{entry}\n" for entry in entries)


def decode_pcie_local_error(data: bytes, timestamp: str,
                            record: VendorRecord | None = None) -> str:
    """Decode a PCIe local section and return its text report.

    Raises ValueError when the section carries no valid information.
    """
    section = parse_pcie_local(data)
    if section.val_bits == 0:
        raise ValueError("decode_hip08_pcie_local_error: no valid error information")
    _bind(record, PcieField.TIMESTAMP, timestamp)
    header = format_pcie_local_header(section, record)
    registers = format_pcie_local_registers(section, record)
    return f"\nHISI HIP08: PCIe local error\n{header}\n{registers}"