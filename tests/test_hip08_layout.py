import struct

import pytest

from rasvendor.hip08_layout import (
    OEM_TYPE1_MODULES,
    OEM_TYPE2_MODULES,
    PCIE_LOCAL_ERR_MISC_MAX,
    module_name,
    parse_oem_type1,
    parse_oem_type2,
    parse_pcie_local,
    pcie_local_submodule_name,
    submodule_name,
)


def test_module_names():
    assert module_name(OEM_TYPE1_MODULES, 1) == "PLL"
    assert module_name(OEM_TYPE1_MODULES, 17) == "USB"
    assert module_name(OEM_TYPE2_MODULES, 5) == "L3TAG"
    assert module_name(OEM_TYPE1_MODULES, 6) == "unknown"


def test_submodule_names():
    assert submodule_name(OEM_TYPE1_MODULES, 1, 3) == "TB_PLL3"
    assert submodule_name(OEM_TYPE2_MODULES, 5, 15) == "TA_PARTITION7"
    assert submodule_name(OEM_TYPE2_MODULES, 1, 2) == "TA_HHA0"


def test_submodule_falls_back_to_module_name():
    assert submodule_name(OEM_TYPE1_MODULES, 0, 5) == "MN"
    assert submodule_name(OEM_TYPE2_MODULES, 2, 0) == "PA"


def test_submodule_unknown():
    assert submodule_name(OEM_TYPE1_MODULES, 15, 2) == "unknown"
    assert submodule_name(OEM_TYPE1_MODULES, 99, 0) == "unknown"


@pytest.mark.parametrize(
    "sub_id, name",
    [(0, "AP_Layer"), (1, "TL_Layer"), (2, "MAC_Layer"), (3, "DL_Layer"),
     (4, "SDI_Layer"), (5, "unknown")],
)
def test_pcie_local_submodule(sub_id, name):
    assert pcie_local_submodule_name(sub_id) == name


def test_parse_oem_type1_round_trip():
    data = struct.pack("<I8B5IQ", 0xFFF, 2, 1, 3, 4, 15, 1, 2, 0xEE,
                       10, 11, 12, 13, 14, 0x123456789ABCDEF0)
    section = parse_oem_type1(data)
    assert section.val_bits == 0xFFF
    assert (section.version, section.soc_id, section.socket_id) == (2, 1, 3)
    assert (section.nimbus_id, section.module_id, section.sub_module_id) == (4, 15, 1)
    assert section.err_severity == 2
    assert (section.err_misc_0, section.err_misc_4) == (10, 14)
    assert section.err_addr == 0x123456789ABCDEF0


def test_parse_oem_type2_round_trip():
    registers = list(range(100, 112))
    data = struct.pack("<I8B12I", 0x3F, 1, 0, 1, 0, 4, 7, 1, 0, *registers)
    section = parse_oem_type2(data)
    assert section.module_id == 4
    assert section.sub_module_id == 7
    assert section.err_fr_0 == 100
    assert section.err_misc1_1 == 111
    assert section.err_status_1 == 105


def test_parse_pcie_local_round_trip():
    misc = list(range(PCIE_LOCAL_ERR_MISC_MAX))
    data = struct.pack(f"<Q8BH2x{PCIE_LOCAL_ERR_MISC_MAX}I",
                       1 << 40, 1, 2, 3, 4, 2, 5, 6, 1, 0xABCD, *misc)
    section = parse_pcie_local(data)
    assert section.val_bits == 1 << 40
    assert section.core_id == 5
    assert section.port_id == 6
    assert section.err_type == 0xABCD
    assert section.err_misc == tuple(misc)


@pytest.mark.parametrize("parser", [parse_oem_type1, parse_oem_type2, parse_pcie_local])
def test_truncated_sections_raise(parser):
    with pytest.raises(ValueError):
        parser(b"\x00" * 10)