"""Decoder for the Hisilicon common error section."""

from __future__ import annotations

import sqlite3
import struct
from dataclasses import dataclass
from enum import IntEnum

from .recording import TableSpec, Value, VendorRecord, err_severity

SECTION_TYPE = "c8b328a8-9917-4af6-9a13-2e08ab2e7586"

_BUF_LEN = 2048
_HEADER = struct.Struct("<I10BHBBHB3xB3xI")


class CommonValid(IntEnum):
    SOC_ID = 0
    SOCKET_ID = 1
    TOTEM_ID = 2
    NIMBUS_ID = 3
    SUBSYSTEM_ID = 4
    MODULE_ID = 5
    SUBMODULE_ID = 6
    CORE_ID = 7
    PORT_ID = 8
    ERR_TYPE = 9
    PCIE_INFO = 10
    ERR_SEVERITY = 11
    REG_ARRAY_SIZE = 12


class CommonField(IntEnum):
    ID = 0
    TIMESTAMP = 1
    VERSION = 2
    SOC_ID = 3
    SOCKET_ID = 4
    TOTEM_ID = 5
    NIMBUS_ID = 6
    SUB_SYSTEM_ID = 7
    MODULE_ID = 8
    SUB_MODULE_ID = 9
    CORE_ID = 10
    PORT_ID = 11
    ERR_TYPE = 12
    PCIE_INFO = 13
    ERR_SEVERITY = 14
    REGS_DUMP = 15


COMMON_TABLE = TableSpec(
    "hisi_common_section_v2",
    (
        ("id", "INTEGER PRIMARY KEY"),
        ("timestamp", "TEXT"),
        ("version", "INTEGER"),
        ("soc_id", "INTEGER"),
        ("socket_id", "INTEGER"),
        ("totem_id", "INTEGER"),
        ("nimbus_id", "INTEGER"),
        ("sub_system_id", "INTEGER"),
        ("module_id", "TEXT"),
        ("sub_module_id", "INTEGER"),
        ("core_id", "INTEGER"),
        ("port_id", "INTEGER"),
        ("err_type", "INTEGER"),
        ("pcie_info", "TEXT"),
        ("err_severity", "TEXT"),
        ("regs_dump", "TEXT"),
    ),
)

_SOC_DESC = ("Kunpeng916", "Kunpeng920", "Kunpeng930")

_MODULE_NAMES = (
    "MN", "PLL", "SLLC", "AA", "SIOE", "POE", "CPA", "DISP", "GIC", "ITS",
    "AVSBUS", "CS", "PPU", "SMMU", "PA", "HLLC", "DDRC", "L3TAG", "L3DATA",
    "PCS", "MATA", "PCIe Local", "SAS", "SATA", "NIC", "RoCE", "USB", "ZIP",
    "HPRE", "SEC", "RDE", "MEE", "L4D", "Tsensor", "ROH", "BTC", "HILINK",
    "STARS", "SDMA", "UC", "HBMC",
)


@dataclass(frozen=True)
class CommonErrorSection:
    """The fields of a Hisilicon common error section."""

    val_bits: int
    version: int
    soc_id: int
    socket_id: int
    totem_id: int
    nimbus_id: int
    subsystem_id: int
    module_id: int
    submodule_id: int
    core_id: int
    port_id: int
    err_type: int
    pcie_function: int
    pcie_device: int
    pcie_segment: int
    pcie_bus: int
    err_severity: int
    reg_array_size: int
    reg_array: tuple[int, ...] = ()


def _valid(section: CommonErrorSection, bit: CommonValid) -> bool:
    return bool(section.val_bits & (1 << bit))


def _bind(record: VendorRecord | None, index: int, value: Value) -> None:
    if record is not None:
        record.bind(index, value)


def _clip(text: str) -> str:
    return text[: _BUF_LEN - 1]


def parse_common_section(data: bytes) -> CommonErrorSection:
    """Parse a raw common error section; raise ValueError if it is truncated."""
    if len(data) < _HEADER.size:
        raise ValueError(
            f"common error section needs {_HEADER.size} bytes, got {len(data)}"
        )
    (val_bits, version, soc_id, socket_id, totem_id, nimbus_id, subsystem_id,
     module_id, submodule_id, core_id, port_id, err_type, function, device,
     segment, bus, severity, reg_size) = _HEADER.unpack_from(data)

    registers: tuple[int, ...] = ()
    if val_bits & (1 << CommonValid.REG_ARRAY_SIZE) and reg_size > 0:
        count = reg_size // 4
        needed = _HEADER.size + count * 4
        if len(data) < needed:
            raise ValueError(
                f"register array needs {needed} bytes, got {len(data)}"
            )
        registers = struct.unpack_from(f"<{count}I", data, _HEADER.size)

    return CommonErrorSection(
        val_bits=val_bits, version=version, soc_id=soc_id, socket_id=socket_id,
        totem_id=totem_id, nimbus_id=nimbus_id, subsystem_id=subsystem_id,
        module_id=module_id, submodule_id=submodule_id, core_id=core_id,
        port_id=port_id, err_type=err_type, pcie_function=function,
        pcie_device=device, pcie_segment=segment, pcie_bus=bus,
        err_severity=severity, reg_array_size=reg_size, reg_array=registers,
    )


def soc_description(soc_id: int) -> str:
    """Return the SoC name for an id, or "unknown"."""
    return _SOC_DESC[soc_id] if 0 <= soc_id < len(_SOC_DESC) else "unknown"


def module_description(module_id: int) -> str:
    """Return the module name for an id, or "unknown"."""
    return _MODULE_NAMES[module_id] if 0 <= module_id < len(_MODULE_NAMES) else "unknown"


def _pcie_id(section: CommonErrorSection) -> str:
    return (f"{section.pcie_segment:04x}:{section.pcie_bus:02x}:"
            f"{section.pcie_device:02x}.{section.pcie_function:x}")


def format_common_header(section: CommonErrorSection,
                         record: VendorRecord | None = None) -> str:
    """Describe the header of a section, binding its fields into ``record``."""
    parts = [f"[ table_version={section.version}"]
    _bind(record, CommonField.VERSION, section.version)

    simple = (
        (CommonValid.SOCKET_ID, "socket_id", section.socket_id, CommonField.SOCKET_ID),
        (CommonValid.TOTEM_ID, "totem_id", section.totem_id, CommonField.TOTEM_ID),
        (CommonValid.NIMBUS_ID, "nimbus_id", section.nimbus_id, CommonField.NIMBUS_ID),
        (CommonValid.SUBSYSTEM_ID, "subsystem_id", section.subsystem_id,
         CommonField.SUB_SYSTEM_ID),
    )

    if _valid(section, CommonValid.SOC_ID):
        parts.append(f"soc={soc_description(section.soc_id)}")
        _bind(record, CommonField.SOC_ID, section.soc_id)

    for bit, label, value, column in simple:
        if _valid(section, bit):
            parts.append(f"{label}={value}")
            _bind(record, column, value)

    if _valid(section, CommonValid.MODULE_ID):
        name = module_description(section.module_id)
        if name == "unknown":
            parts.append(f"module=unknown(id={section.module_id})")
        else:
            parts.append(f"module={name}")
        _bind(record, CommonField.MODULE_ID, name)

    trailing = (
        (CommonValid.SUBMODULE_ID, "submodule_id", section.submodule_id,
         CommonField.SUB_MODULE_ID),
        (CommonValid.CORE_ID, "core_id", section.core_id, CommonField.CORE_ID),
        (CommonValid.PORT_ID, "port_id", section.port_id, CommonField.PORT_ID),
        (CommonValid.ERR_TYPE, "err_type", section.err_type, CommonField.ERR_TYPE),
    )
    for bit, label, value, column in trailing:
        if _valid(section, bit):
            parts.append(f"{label}={value}")
            _bind(record, column, value)

    if _valid(section, CommonValid.PCIE_INFO):
        pcie = _pcie_id(section)
        parts.append(f"pcie_device_id={pcie}")
        _bind(record, CommonField.PCIE_INFO, pcie)

    if _valid(section, CommonValid.ERR_SEVERITY):
        severity = err_severity(section.err_severity)
        parts.append(f"err_severity={severity}")
        _bind(record, CommonField.ERR_SEVERITY, severity)

    parts.append("]")
    return _clip(" ".join(parts))


def add_common_table(connection: sqlite3.Connection | None) -> VendorRecord | None:
    """Create the common section table; return None when not recording."""
    if connection is None:
        return None
    return COMMON_TABLE.create(connection)


def decode_common_section(data: bytes, timestamp: str,
                          record: VendorRecord | None = None) -> str:
    """Decode a common error section and return its text report.

    When ``record`` is given, the decoded fields are stored as one row.
    """
    section = parse_common_section(data)
    lines = ["", "Hisilicon Common Error Section:", format_common_header(section, record)]

    registers = [f"reg{index:02d}=0x{value:08x}"
                 for index, value in enumerate(section.reg_array)]
    if registers:
        lines.append("Register Dump:")
        lines.extend(registers)

    if record is not None:
        record.bind(CommonField.TIMESTAMP, timestamp)
        record.bind(CommonField.REGS_DUMP, _clip(" ".join(registers)))
        record.step("hisi_common_section_tab")

    return "\n".join(lines) + "\n"