"""Decoder for Yitian DDR error payloads."""

from __future__ import annotations

import logging
import sqlite3
import struct
from dataclasses import dataclass
from datetime import datetime

from .recording import TableSpec, VendorRecord

log = logging.getLogger(__name__)

SECTION_TYPE = "a6980811-16ea-4e4d-b936-fb00a23ff29c"
YITIAN_RAS_TYPE_DDR = 0x50

_LAYOUT = struct.Struct("<BBH31I")

REGISTER_NAMES = (
    "Error Type:", "Error SubType:", "Error Instance:",
    "ECCCFG0:", "ECCCFG1:", "ECCSTAT:", "ECCERRCNT:", "ECCCADDR0:",
    "ECCCADDR1:", "ECCCSYN0:", "ECCCSYN1:", "ECCCSYN2:", "ECCUADDR0:",
    "ECCUADDR1:", "ECCUSYN0:", "ECCUSYN1:", "ECCUSYN2:", "ECCBITMASK0:",
    "ECCBITMASK1:", "ECCBITMASK2:", "ADVECCSTAT:", "ECCAPSTAT:",
    "ECCCDATA0:", "ECCCDATA1:", "ECCUDATA0:", "ECCUDATA1:", "ECCSYMBOL:",
    "ECCERRCNTCTL:", "ECCERRCNTSTAT:", "ECCERRCNT0:", "ECCERRCNT1:",
    "RESERVED0:", "RESERVED1:", "RESERVED2:",
)

# type id -> (name, sub-type names or None)
_TYPES: dict[int, tuple[str, tuple[str, ...] | None]] = {
    YITIAN_RAS_TYPE_DDR: ("DDR", None),
}

DDR_TABLE = TableSpec(
    "yitian_ddr_reg_dump_event",
    (
        ("id", "INTEGER PRIMARY KEY"),
        ("timestamp", "TEXT"),
        ("address", "INTEGER"),
        ("regs_dump", "TEXT"),
    ),
)


@dataclass(frozen=True)
class DdrPayload:
    """A DDR payload: header fields and the 31 ECC registers in order."""

    type: int
    subtype: int
    instance: int
    registers: tuple[int, ...]


@dataclass
class DdrDumpEvent:
    """A DDR register dump ready to be stored."""

    timestamp: str
    reg_msg: str
    address: int = 0


def parse_ddr_payload(data: bytes) -> DdrPayload:
    """Parse a raw DDR payload; raise ValueError if it is truncated."""
    if len(data) < _LAYOUT.size:
        raise ValueError(f"DDR payload needs {_LAYOUT.size} bytes, got {len(data)}")
    type_id, subtype, instance, *registers = _LAYOUT.unpack_from(data)
    return DdrPayload(type_id, subtype, instance, tuple(registers))


def type_name(type_id: int) -> str:
    """Return the name of an error type, or "unknown"."""
    entry = _TYPES.get(type_id)
    return entry[0] if entry else "unknown"


def subtype_name(type_id: int, sub_type_id: int) -> str:
    """Return the sub-type name; types without sub-types use their own name."""
    entry = _TYPES.get(type_id)
    if entry is None:
        return "unknown"
    name, subs = entry
    if subs is None:
        return name
    return subs[sub_type_id] if 0 <= sub_type_id < len(subs) else "unknown"


def format_ddr_payload(payload: DdrPayload) -> str:
    """Render the payload as a single-line register dump."""
    parts = [
        f" {REGISTER_NAMES[0]} {type_name(payload.type)},",
        f" {REGISTER_NAMES[1]} {subtype_name(payload.type, payload.subtype)},",
        f" {REGISTER_NAMES[2]} 0x{payload.instance:x},",
    ]
    parts.extend(f" {name} 0x{value:x} "
                 for name, value in zip(REGISTER_NAMES[3:], payload.registers))
    return "".join(parts)[:-1]


def add_ddr_table(connection: sqlite3.Connection | None) -> VendorRecord | None:
    """Create the DDR dump table; return None when not recording."""
    if connection is None:
        return None
    return DDR_TABLE.create(connection)


def store_ddr_event(record: VendorRecord, event: DdrDumpEvent) -> bool:
    """Store one DDR dump event; return whether the row was written."""
    log.info("yitian_ddr_reg_dump_event store: %s", record.table.name)
    record.bind(1, event.timestamp)
    record.bind(2, event.address)
    record.bind(3, event.reg_msg)
    stored = record.step("yitian_ddr_reg_dump_event")
    if stored:
        log.info("register inserted at db")
    return stored


def decode_yitian_error(data: bytes, record: VendorRecord | None = None,
                        now: datetime | None = None) -> DdrDumpEvent:
    """Decode a Yitian error section into a dump event, storing it if asked.

    The text report is the event's ``reg_msg``. Raises ValueError for a
    payload type other than DDR.
    """
    if not data or data[0] != YITIAN_RAS_TYPE_DDR:
        raise ValueError("decode_yitian710_ns_error: wrong payload type")
    payload = parse_ddr_payload(data)

    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()

    event = DdrDumpEvent(
        timestamp=now.strftime("%Y-%m-%d %H:%M:%S %z"),
        reg_msg=format_ddr_payload(payload),
    )
    if record is not None:
        store_ddr_event(record, event)
    return event