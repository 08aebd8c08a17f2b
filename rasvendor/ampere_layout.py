"""Binary layouts of Ampere vendor error payloads."""

from __future__ import annotations

import struct
from dataclasses import dataclass

SECTION_TYPE = "e8ed898ddf1643cc8ecc54f060ef157f"

BUF_LEN = 1024

PAYLOAD_TYPE_0 = 0x00
PAYLOAD_TYPE_1 = 0x01
PAYLOAD_TYPE_2 = 0x02
PAYLOAD_TYPE_3 = 0x03

AMP_RAS_TYPE_CPU = 0
AMP_RAS_TYPE_MCU = 1
AMP_RAS_TYPE_MESH = 2
AMP_RAS_TYPE_2P_LINK_QS = 3
AMP_RAS_TYPE_2P_LINK_MQ = 4
AMP_RAS_TYPE_GIC = 5
AMP_RAS_TYPE_SMMU = 6
AMP_RAS_TYPE_PCIE_AER = 7
AMP_RAS_TYPE_PCIE_RASDP = 8
AMP_RAS_TYPE_OCM = 9
AMP_RAS_TYPE_SMPRO = 10
AMP_RAS_TYPE_PMPRO = 11
AMP_RAS_TYPE_ATF_FW = 12
AMP_RAS_TYPE_SMPRO_FW = 13
AMP_RAS_TYPE_PMPRO_FW = 14
AMP_RAS_TYPE_BERT = 63

_PAYLOAD0 = struct.Struct("<BBHI5Q")
_PAYLOAD1 = struct.Struct("<BBH9IQ")
_PAYLOAD2 = struct.Struct("<BBH7I2Q")
_PAYLOAD3 = struct.Struct("<BBHI5Q")


def socket_num(instance: int) -> int:
    """Return the processor socket held in an instance field."""
    return (instance >> 14) & 0x3


def payload_type(first_byte: int) -> int:
    """Return the payload type held in the first byte of a payload."""
    return (first_byte >> 6) & 0x3


def error_type(type_byte: int) -> int:
    """Return the error type held in the type byte."""
    return type_byte & 0x3F


def instance_number(instance: int) -> int:
    """Return the instance number held in an instance field."""
    return instance & 0x3FFF


@dataclass(frozen=True)
class Payload0:
    """ARMv8 RAS compliant error record."""

    type: int
    subtype: int
    instance: int
    err_status: int
    err_addr: int
    err_misc_0: int
    err_misc_1: int
    err_misc_2: int
    err_misc_3: int


@dataclass(frozen=True)
class Payload1:
    """PCIe AER error record."""

    type: int
    subtype: int
    instance: int
    uncore_status: int
    uncore_mask: int
    uncore_sev: int
    core_status: int
    core_mask: int
    root_err_cmd: int
    root_status: int
    src_id: int
    reserved1: int
    reserved2: int


@dataclass(frozen=True)
class Payload2:
    """PCIe RAS data path error record."""

    type: int
    subtype: int
    instance: int
    ce_register: int
    ce_location: int
    ce_addr: int
    ue_register: int
    ue_location: int
    ue_addr: int
    reserved1: int
    reserved2: int
    reserved3: int


@dataclass(frozen=True)
class Payload3:
    """Firmware-specific error record."""

    type: int
    subtype: int
    instance: int
    fw_speci_data0: int
    fw_speci_data1: int
    fw_speci_data2: int
    fw_speci_data3: int
    fw_speci_data4: int
    fw_speci_data5: int


def _unpack(layout: struct.Struct, data: bytes, what: str) -> tuple[int, ...]:
    if len(data) < layout.size:
        raise ValueError(f"{what} needs {layout.size} bytes, got {len(data)}")
    return layout.unpack_from(data)


def parse_payload0(data: bytes) -> Payload0:
    """Parse a type-0 payload; raise ValueError if it is truncated."""
    return Payload0(*_unpack(_PAYLOAD0, data, "payload type 0"))


def parse_payload1(data: bytes) -> Payload1:
    """Parse a type-1 payload; raise ValueError if it is truncated."""
    return Payload1(*_unpack(_PAYLOAD1, data, "payload type 1"))


def parse_payload2(data: bytes) -> Payload2:
    """Parse a type-2 payload; raise ValueError if it is truncated."""
    return Payload2(*_unpack(_PAYLOAD2, data, "payload type 2"))


def parse_payload3(data: bytes) -> Payload3:
    """Parse a type-3 payload; raise ValueError if it is truncated."""
    return Payload3(*_unpack(_PAYLOAD3, data, "payload type 3"))