"""Binary layouts and name tables of HIP08 vendor error sections."""

from __future__ import annotations

import struct
from dataclasses import dataclass

OEM_TYPE1_SECTION_TYPE = "1f8161e1-55d6-41e6-bd10-7afd1dc5f7c5"
OEM_TYPE2_SECTION_TYPE = "45534ea6-ce23-4115-8535-e07ab3aef91d"
PCIE_LOCAL_SECTION_TYPE = "b2889fc9-e7d7-4f9d-a867-af42e98be772"

BUF_LEN = 1024

# Validity bits shared by both OEM formats.
VALID_SOC_ID = 1 << 0
VALID_SOCKET_ID = 1 << 1
VALID_NIMBUS_ID = 1 << 2
VALID_MODULE_ID = 1 << 3
VALID_SUB_MODULE_ID = 1 << 4
VALID_ERR_SEVERITY = 1 << 5

TYPE1_VALID_ERR_MISC_0 = 1 << 6
TYPE1_VALID_ERR_MISC_1 = 1 << 7
TYPE1_VALID_ERR_MISC_2 = 1 << 8
TYPE1_VALID_ERR_MISC_3 = 1 << 9
TYPE1_VALID_ERR_MISC_4 = 1 << 10
TYPE1_VALID_ERR_ADDR = 1 << 11

TYPE2_VALID_ERR_FR = 1 << 6
TYPE2_VALID_ERR_CTRL = 1 << 7
TYPE2_VALID_ERR_STATUS = 1 << 8
TYPE2_VALID_ERR_ADDR = 1 << 9
TYPE2_VALID_ERR_MISC_0 = 1 << 10
TYPE2_VALID_ERR_MISC_1 = 1 << 11

PCIE_LOCAL_VALID_VERSION = 1 << 0
PCIE_LOCAL_VALID_SOC_ID = 1 << 1
PCIE_LOCAL_VALID_SOCKET_ID = 1 << 2
PCIE_LOCAL_VALID_NIMBUS_ID = 1 << 3
PCIE_LOCAL_VALID_SUB_MODULE_ID = 1 << 4
PCIE_LOCAL_VALID_CORE_ID = 1 << 5
PCIE_LOCAL_VALID_PORT_ID = 1 << 6
PCIE_LOCAL_VALID_ERR_TYPE = 1 << 7
PCIE_LOCAL_VALID_ERR_SEVERITY = 1 << 8
PCIE_LOCAL_VALID_ERR_MISC = 9

PCIE_LOCAL_ERR_MISC_MAX = 33

_TYPE1 = struct.Struct("<I8B5IQ")
_TYPE2 = struct.Struct("<I8B12I")
_PCIE_LOCAL = struct.Struct(f"<Q8BH2x{PCIE_LOCAL_ERR_MISC_MAX}I")


@dataclass(frozen=True)
class ModuleInfo:
    """A module id, its name and the names of its sub-modules, if any."""

    id: int
    name: str
    sub: tuple[str, ...] | None = None


OEM_TYPE1_MODULES: tuple[ModuleInfo, ...] = (
    ModuleInfo(1, "PLL", (
        "TB_PLL0", "TB_PLL1", "TB_PLL2", "TB_PLL3",
        "TA_PLL0", "TA_PLL1", "TA_PLL2", "TA_PLL3",
        "NIMBUS_PLL0", "NIMBUS_PLL1", "NIMBUS_PLL2", "NIMBUS_PLL3", "NIMBUS_PLL4",
    )),
    ModuleInfo(15, "SAS", ("SAS0", "SAS1")),
    ModuleInfo(5, "POE", ("TB_POE", "TA_POE")),
    ModuleInfo(2, "SLLC", (
        "TB_SLLC0", "TB_SLLC1", "TB_SLLC2", "TA_SLLC0", "TA_SLLC1", "TA_SLLC2",
        "NIMBUS_SLLC0", "NIMBUS_SLLC1",
    )),
    ModuleInfo(4, "SIOE", (
        "TB_SIOE0", "TB_SIOE1", "TB_SIOE2", "TB_SIOE3",
        "TA_SIOE0", "TA_SIOE1", "TA_SIOE2", "TA_SIOE3",
        "NIMBUS_SIOE0", "NIMBUS_SIOE1",
    )),
    ModuleInfo(8, "DISP", (
        "TB_PERI_DISP", "TB_POE_DISP", "TB_GIC_DISP", "TA_PERI_DISP",
        "TA_POE_DISP", "TA_GIC_DISP", "HAC_DISP", "PCIE_DISP",
        "IO_MGMT_DISP", "NETWORK_DISP",
    )),
    ModuleInfo(0, "MN"),
    ModuleInfo(3, "AA"),
    ModuleInfo(9, "LPC"),
    ModuleInfo(13, "GIC"),
    ModuleInfo(14, "RDE"),
    ModuleInfo(16, "SATA"),
    ModuleInfo(17, "USB"),
)

OEM_TYPE2_MODULES: tuple[ModuleInfo, ...] = (
    ModuleInfo(0, "SMMU", ("HAC_SMMU", "PCIE_SMMU", "MGMT_SMMU", "NIC_SMMU")),
    ModuleInfo(1, "HHA", ("TB_HHA0", "TB_HHA1", "TA_HHA0", "TA_HHA1")),
    ModuleInfo(2, "PA"),
    ModuleInfo(3, "HLLC", ("HLLC0", "HLLC1", "HLLC2")),
    ModuleInfo(4, "DDRC", (
        "TB_DDRC0", "TB_DDRC1", "TB_DDRC2", "TB_DDRC3",
        "TA_DDRC0", "TA_DDRC1", "TA_DDRC2", "TA_DDRC3",
    )),
    ModuleInfo(5, "L3TAG", tuple(
        [f"TB_PARTITION{i}" for i in range(8)] + [f"TA_PARTITION{i}" for i in range(8)]
    )),
    ModuleInfo(6, "L3DATA", (
        "TB_BANK0", "TB_BANK1", "TB_BANK2", "TB_BANK3",
        "TA_BANK0", "TA_BANK1", "TA_BANK2", "TA_BANK3",
    )),
)

_PCIE_SUBMODULES = {
    0: "AP_Layer",
    1: "TL_Layer",
    2: "MAC_Layer",
    3: "DL_Layer",
    4: "SDI_Layer",
}


@dataclass(frozen=True)
class OemType1Section:
    """An OEM type-1 error section."""

    val_bits: int
    version: int
    soc_id: int
    socket_id: int
    nimbus_id: int
    module_id: int
    sub_module_id: int
    err_severity: int
    err_misc_0: int
    err_misc_1: int
    err_misc_2: int
    err_misc_3: int
    err_misc_4: int
    err_addr: int


@dataclass(frozen=True)
class OemType2Section:
    """An OEM type-2 error section."""

    val_bits: int
    version: int
    soc_id: int
    socket_id: int
    nimbus_id: int
    module_id: int
    sub_module_id: int
    err_severity: int
    err_fr_0: int
    err_fr_1: int
    err_ctrl_0: int
    err_ctrl_1: int
    err_status_0: int
    err_status_1: int
    err_addr_0: int
    err_addr_1: int
    err_misc0_0: int
    err_misc0_1: int
    err_misc1_0: int
    err_misc1_1: int


@dataclass(frozen=True)
class PcieLocalSection:
    """A PCIe local error section."""

    val_bits: int
    version: int
    soc_id: int
    socket_id: int
    nimbus_id: int
    sub_module_id: int
    core_id: int
    port_id: int
    err_severity: int
    err_type: int
    err_misc: tuple[int, ...]


def _require(layout: struct.Struct, data: bytes, what: str) -> None:
    if len(data) < layout.size:
        raise ValueError(f"{what} needs {layout.size} bytes, got {len(data)}")


def parse_oem_type1(data: bytes) -> OemType1Section:
    """Parse an OEM type-1 section; raise ValueError if it is truncated."""
    _require(_TYPE1, data, "OEM type-1 section")
    fields = _TYPE1.unpack_from(data)
    # fields[8] is the reserved byte
    return OemType1Section(*fields[:8], *fields[9:])


def parse_oem_type2(data: bytes) -> OemType2Section:
    """Parse an OEM type-2 section; raise ValueError if it is truncated."""
    _require(_TYPE2, data, "OEM type-2 section")
    fields = _TYPE2.unpack_from(data)
    return OemType2Section(*fields[:8], *fields[9:])


def parse_pcie_local(data: bytes) -> PcieLocalSection:
    """Parse a PCIe local section; raise ValueError if it is truncated."""
    _require(_PCIE_LOCAL, data, "PCIe local section")
    fields = _PCIE_LOCAL.unpack_from(data)
    return PcieLocalSection(*fields[:10], err_misc=tuple(fields[10:]))


def module_name(table: tuple[ModuleInfo, ...], module_id: int) -> str:
    """Return the name of a module in ``table``, or "unknown"."""
    return next((info.name for info in table if info.id == module_id), "unknown")


def submodule_name(table: tuple[ModuleInfo, ...], module_id: int,
                   sub_module_id: int) -> str:
    """Return a sub-module name; modules without sub-modules use their own name."""
    for info in table:
        if info.id != module_id:
            continue
        if info.sub is None:
            return info.name
        if not 0 <= sub_module_id < len(info.sub):
            return "unknown"
        return info.sub[sub_module_id]
    return "unknown"


def pcie_local_submodule_name(sub_module_id: int) -> str:
    """Return the PCIe layer name of a sub-module id, or "unknown"."""
    return _PCIE_SUBMODULES.get(sub_module_id, "unknown")