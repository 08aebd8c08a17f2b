"""Decoders for the HIP08 OEM type-1 and type-2 error sections."""

from __future__ import annotations

import sqlite3
from enum import IntEnum
from typing import Iterable

from .hip08_layout import (
    BUF_LEN,
    OEM_TYPE1_MODULES,
    OEM_TYPE2_MODULES,
    TYPE1_VALID_ERR_ADDR,
    TYPE1_VALID_ERR_MISC_0,
    TYPE1_VALID_ERR_MISC_1,
    TYPE1_VALID_ERR_MISC_2,
    TYPE1_VALID_ERR_MISC_3,
    TYPE1_VALID_ERR_MISC_4,
    TYPE2_VALID_ERR_ADDR,
    TYPE2_VALID_ERR_CTRL,
    TYPE2_VALID_ERR_FR,
    TYPE2_VALID_ERR_MISC_0,
    TYPE2_VALID_ERR_MISC_1,
    TYPE2_VALID_ERR_STATUS,
    VALID_ERR_SEVERITY,
    VALID_MODULE_ID,
    VALID_NIMBUS_ID,
    VALID_SOC_ID,
    VALID_SOCKET_ID,
    VALID_SUB_MODULE_ID,
    ModuleInfo,
    OemType1Section,
    OemType2Section,
    module_name,
    parse_oem_type1,
    parse_oem_type2,
    submodule_name,
)
from .recording import TableSpec, Value, VendorRecord, err_severity


class OemField(IntEnum):
    """Column positions shared by both OEM tables."""

    ID = 0
    TIMESTAMP = 1
    VERSION = 2
    SOC_ID = 3
    SOCKET_ID = 4
    NIMBUS_ID = 5
    MODULE_ID = 6
    SUB_MODULE_ID = 7
    ERR_SEV = 8
    REGS_DUMP = 9


_OEM_FIELDS = (
    ("id", "INTEGER PRIMARY KEY"),
    ("timestamp", "TEXT"),
    ("version", "INTEGER"),
    ("soc_id", "INTEGER"),
    ("socket_id", "INTEGER"),
    ("nimbus_id", "INTEGER"),
    ("module_id", "TEXT"),
    ("sub_module_id", "TEXT"),
    ("err_severity", "TEXT"),
    ("regs_dump", "TEXT"),
)

OEM_TYPE1_TABLE = TableSpec("hip08_oem_type1_event_v2", _OEM_FIELDS)
OEM_TYPE2_TABLE = TableSpec("hip08_oem_type2_event_v2", _OEM_FIELDS)


def _bind(record: VendorRecord | None, index: int, value: Value) -> None:
    if record is not None:
        record.bind(index, value)


def _clip(text: str) -> str:
    return text[: BUF_LEN - 1]


def add_oem_type1_table(connection: sqlite3.Connection | None) -> VendorRecord | None:
    """Create the OEM type-1 table; return None when not recording."""
    if connection is None:
        return None
    return OEM_TYPE1_TABLE.create(connection)


def add_oem_type2_table(connection: sqlite3.Connection | None) -> VendorRecord | None:
    """Create the OEM type-2 table; return None when not recording."""
    if connection is None:
        return None
    return OEM_TYPE2_TABLE.create(connection)


def _format_header(section: OemType1Section | OemType2Section,
                   record: VendorRecord | None,
                   modules: tuple[ModuleInfo, ...]) -> str:
    bits = section.val_bits
    parts = [f"table_version={section.version}"]
    _bind(record, OemField.VERSION, section.version)

    for bit, label, value, column in (
        (VALID_SOC_ID, "SOC_ID", section.soc_id, OemField.SOC_ID),
        (VALID_SOCKET_ID, "socket_ID", section.socket_id, OemField.SOCKET_ID),
        (VALID_NIMBUS_ID, "nimbus_ID", section.nimbus_id, OemField.NIMBUS_ID),
    ):
        if bits & bit:
            parts.append(f"{label}={value}")
            _bind(record, column, value)

    if bits & VALID_MODULE_ID:
        name = module_name(modules, section.module_id)
        parts.append(f"module={name}")
        _bind(record, OemField.MODULE_ID, name)

    if bits & VALID_SUB_MODULE_ID:
        name = submodule_name(modules, section.module_id, section.sub_module_id)
        parts.append(f"submodule={name}")
        _bind(record, OemField.SUB_MODULE_ID, name)

    if bits & VALID_ERR_SEVERITY:
        severity = err_severity(section.err_severity)
        parts.append(f"error_severity={severity}")
        _bind(record, OemField.ERR_SEV, severity)

    return _clip("[ " + " ".join(parts) + " ]")


def _format_registers(entries: Iterable[str], record: VendorRecord | None,
                      table_name: str) -> str:
    entries = list(entries)
    if record is not None:
        record.bind(OemField.REGS_DUMP, _clip(" ".join(entries)))
        record.step(table_name)
    return "Reg Dump:\n" + "".join(f"{entry}\n" for entry in entries)


def format_oem_type1_header(section: OemType1Section,
                            record: VendorRecord | None = None) -> str:
    """Describe a type-1 header, binding its fields into ``record``."""
    return _format_header(section, record, OEM_TYPE1_MODULES)


def format_oem_type1_registers(section: OemType1Section,
                               record: VendorRecord | None = None) -> str:
    """Describe the valid type-1 registers; store the row when recording."""
    candidates = (
        (TYPE1_VALID_ERR_MISC_0, "ERR_MISC0", section.err_misc_0),
        (TYPE1_VALID_ERR_MISC_1, "ERR_MISC1", section.err_misc_1),
        (TYPE1_VALID_ERR_MISC_2, "ERR_MISC2", section.err_misc_2),
        (TYPE1_VALID_ERR_MISC_3, "ERR_MISC3", section.err_misc_3),
        (TYPE1_VALID_ERR_MISC_4, "ERR_MISC4", section.err_misc_4),
        (TYPE1_VALID_ERR_ADDR, "ERR_ADDR", section.err_addr),
    )
    entries = (f"{label}=0x{value:x}" for bit, label, value in candidates
               if section.val_bits & bit)
    return _format_registers(entries, record, "hip08_oem_type1_event_tab")


def format_oem_type2_header(section: OemType2Section,
                            record: VendorRecord | None = None) -> str:
    """Describe a type-2 header, binding its fields into ``record``."""
    return _format_header(section, record, OEM_TYPE2_MODULES)


def format_oem_type2_registers(section: OemType2Section,
                               record: VendorRecord | None = None) -> str:
    """Describe the valid type-2 register pairs; store the row when recording."""
    candidates = (
        (TYPE2_VALID_ERR_FR, "ERR_FR", section.err_fr_0, section.err_fr_1),
        (TYPE2_VALID_ERR_CTRL, "ERR_CTRL", section.err_ctrl_0, section.err_ctrl_1),
        (TYPE2_VALID_ERR_STATUS, "ERR_STATUS",
         section.err_status_0, section.err_status_1),
        (TYPE2_VALID_ERR_ADDR, "ERR_ADDR", section.err_addr_0, section.err_addr_1),
        (TYPE2_VALID_ERR_MISC_0, "ERR_MISC0",
         section.err_misc0_0, section.err_misc0_1),
        (TYPE2_VALID_ERR_MISC_1, "ERR_MISC1",
         section.err_misc1_0, section.err_misc1_1),
    )
    entries = []
    for bit, label, low, high in candidates:
        if section.val_bits & bit:
            entries.append(f"{label}_0=0x{low:x}")
            entries.append(f"{label}_1=0x{high:x}")
    return _format_registers(entries, record, "hip08_oem_type2_event_tab")


def decode_oem_type1_error(data: bytes, timestamp: str,
                           record: VendorRecord | None = None) -> str:
    """Decode an OEM type-1 section and return its text report.

    Raises ValueError when the section carries no valid information.
    """
    section = parse_oem_type1(data)
    if section.val_bits == 0:
        raise ValueError("decode_hip08_oem_type1_error: no valid error information")
    _bind(record, OemField.TIMESTAMP, timestamp)
    header = format_oem_type1_header(section, record)
    registers = format_oem_type1_registers(section, record)
    return f"\nHISI HIP08: OEM Type-1 Error\n{header}\n{registers}"


def decode_oem_type2_error(data: bytes, timestamp: str,
                           record: VendorRecord | None = None) -> str:
    """Decode an OEM type-2 section and return its text report.

    Raises ValueError when the section carries no valid information.
    """
    section = parse_oem_type2(data)
    if section.val_bits == 0:
        raise ValueError("decode_hip08_oem_type2_error: no valid error information")
    _bind(record, OemField.TIMESTAMP, timestamp)
    header = format_oem_type2_header(section, record)
    registers = format_oem_type2_registers(section, record)
    return f"\nHISI HIP08: OEM Type-2 Error\n{header}\n{registers}"