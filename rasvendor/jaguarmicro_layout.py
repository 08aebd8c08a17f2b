"""Binary layouts of JaguarMicro vendor error payloads."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

PAYLOAD_TYPE_0 = 0x00
PAYLOAD_TYPE_1 = 0x01
PAYLOAD_TYPE_2 = 0x02
PAYLOAD_TYPE_3 = 0x03
PAYLOAD_TYPE_4 = 0x04
PAYLOAD_TYPE_5 = 0x05
PAYLOAD_TYPE_6 = 0x06
PAYLOAD_TYPE_7 = 0x07
PAYLOAD_TYPE_8 = 0x08
PAYLOAD_TYPE_9 = 0x09

PAYLOAD_VERSION = 0


class CommonValid(IntEnum):
    VERSION = 0
    SOC_ID = 1
    SUBSYSTEM_ID = 2
    MODULE_ID = 3
    SUBMODULE_ID = 4
    DEV_ID = 5
    ERR_TYPE = 6
    ERR_SEVERITY = 7
    REG_ARRAY_SIZE = 11


class PayloadField(IntEnum):
    ID = 0
    TIMESTAMP = 1
    VERSION = 2
    SOC_ID = 3
    SUB_SYS = 4
    MODULE = 5
    MODULE_ID = 6
    SUB_MODULE = 7
    SUBMODULE_ID = 8
    DEV = 9
    DEV_ID = 10
    ERR_TYPE = 11
    ERR_SEVERITY = 12
    REGS_DUMP = 13


_HEAD = struct.Struct("<I6BHB3x")
_TAIL_SIZE = struct.Struct("<I")

# payload type -> (register field names, struct code of each register)
PAYLOAD_REGISTERS: dict[int, tuple[tuple[str, ...], str]] = {
    PAYLOAD_TYPE_0: ((
        "lock_control", "lock_function", "cfg_ram_id", "err_fr_low32",
        "err_fr_high32", "err_ctlr_low32", "ecc_status_low32",
        "ecc_addr_low32", "ecc_addr_high32", "ecc_misc0_low32",
        "ecc_misc0_high32", "ecc_misc1_low32", "ecc_misc1_high32",
        "ecc_misc2_low32", "ecc_misc2_high32",
    ), "I"),
    PAYLOAD_TYPE_1: (("smmu_csr", "errfr", "errctlr", "errstatus", "errgen"), "I"),
    PAYLOAD_TYPE_2: ((
        "ecc_1bit_int_low", "ecc_1bit_int_high",
        "ecc_2bit_int_low", "ecc_2bit_int_high",
    ), "I"),
    PAYLOAD_TYPE_5: ((
        "cfgm_mxp_0", "cfgm_hnf_0", "cfgm_hni_0", "cfgm_sbsx_0", "errfr_NS",
        "errctlrr_NS", "errstatusr_NS", "erraddrr_NS", "errmiscr_NS", "errfr",
        "errctlr", "errstatus", "erraddr", "errmisc",
    ), "Q"),
    PAYLOAD_TYPE_6: ((
        "record_id", "gict_err_fr", "gict_err_ctlr", "gict_err_status",
        "gict_err_addr", "gict_err_misc0", "gict_err_misc1", "gict_errgsr",
    ), "Q"),
}


@dataclass(frozen=True)
class CommonHead:
    """The common header of every JaguarMicro payload."""

    val_bits: int
    version: int
    soc_id: int
    subsystem_id: int
    module_id: int
    submodule_id: int
    dev_id: int
    err_type: int
    err_severity: int

    def valid(self, bit: CommonValid) -> bool:
        return bool(self.val_bits & (1 << bit))


@dataclass(frozen=True)
class JaguarPayload:
    """A parsed payload: header, type-specific registers and extended registers."""

    payload_type: int
    head: CommonHead
    registers: tuple[int, ...]
    reg_array_size: int
    reg_array: tuple[int, ...] = ()

    @property
    def register_names(self) -> tuple[str, ...]:
        return PAYLOAD_REGISTERS[self.payload_type][0]


def parse_common_head(data: bytes) -> CommonHead:
    """Parse the common header; raise ValueError if it is truncated."""
    if len(data) < _HEAD.size:
        raise ValueError(f"common header needs {_HEAD.size} bytes, got {len(data)}")
    return CommonHead(*_HEAD.unpack_from(data))


def parse_payload(data: bytes, payload_type: int) -> JaguarPayload:
    """Parse a payload of the given type.

    Raises ValueError for an unsupported payload type or truncated data.
    """
    try:
        _names, code = PAYLOAD_REGISTERS[payload_type]
    except KeyError:
        raise ValueError(f"wrong payload type {payload_type}") from None
    head = parse_common_head(data)

    layout = struct.Struct(f"<{len(_names)}{code}")
    tail_offset = _HEAD.size + layout.size
    if len(data) < tail_offset + _TAIL_SIZE.size:
        raise ValueError(
            f"payload type {payload_type} needs {tail_offset + _TAIL_SIZE.size} "
            f"bytes, got {len(data)}"
        )
    registers = layout.unpack_from(data, _HEAD.size)
    (reg_size,) = _TAIL_SIZE.unpack_from(data, tail_offset)

    reg_array: tuple[int, ...] = ()
    if head.valid(CommonValid.REG_ARRAY_SIZE) and reg_size > 0:
        start = tail_offset + _TAIL_SIZE.size
        needed = start + reg_size * 4
        if len(data) < needed:
            raise ValueError(f"register array needs {needed} bytes, got {len(data)}")
        reg_array = struct.unpack_from(f"<{reg_size}I", data, start)

    return JaguarPayload(payload_type, head, tuple(registers), reg_size, reg_array)