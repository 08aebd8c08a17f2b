# rasvendor

Decoders for vendor-specific hardware error sections: the "non-standard"
sections that platform firmware reports alongside the standard ones. A
decoder turns the raw bytes of a section into a readable text report and,
when given a record writer, stores the decoded fields as one row of an
SQLite table.

The package uses only the standard library.

## Installation

```
pip install .
```

Install the `test` extra (`pip install .[test]`) to run the tests with pytest.

## What is included

Full decoders (text report plus optional SQLite recording):

- `rasvendor.hisilicon` – HiSilicon common error section
  (`decode_common_section`, table `hisi_common_section_v2`).
- `rasvendor.hip08_oem` – HIP08 OEM type-1 and type-2 sections
  (`decode_oem_type1_error`, `decode_oem_type2_error`, tables
  `hip08_oem_type1_event_v2` and `hip08_oem_type2_event_v2`).
- `rasvendor.hip08_pcie` – HIP08 PCIe local errors
  (`decode_pcie_local_error`, table `hip08_pcie_local_event_v2`).
- `rasvendor.yitian` – Yitian DDR register dumps
  (`decode_yitian_error`, table `yitian_ddr_reg_dump_event`).

Layouts and name tables:

- `rasvendor.hip08_layout` – parsers for the HIP08 sections and their
  module / sub-module names.
- `rasvendor.ampere_layout` – parsers for Ampere payload types 0–3
  (`parse_payload0` … `parse_payload3`) and the bit-field helpers
  `payload_type`, `error_type`, `socket_num` and `instance_number`.
- `rasvendor.jaguarmicro_layout` – parsers for the JaguarMicro common
  header and payload types 0, 1, 2, 5 and 6 (`parse_common_head`,
  `parse_payload`).
- `rasvendor.jaguarmicro_names` – JaguarMicro sub-system, module,
  sub-module, device and severity names.

Support:

- `rasvendor.recording` – `TableSpec` (a table definition whose `create`
  makes the table and returns a writer), `VendorRecord` (binds column values
  by position and inserts them with `step`), and `err_severity`.
- `rasvendor.eventqueue` – `EventQueue`, a first-in first-out queue of
  timestamped values.

Each decoder module exposes the section GUID it handles as a constant
(`SECTION_TYPE`, or `OEM_TYPE1_SECTION_TYPE`, `OEM_TYPE2_SECTION_TYPE` and
`PCIE_LOCAL_SECTION_TYPE` in `rasvendor.hip08_layout`).

## Usage

Decoding a HiSilicon common section and recording it:

```python
import sqlite3
from rasvendor.hisilicon import add_common_table, decode_common_section

connection = sqlite3.connect("ras-events.db")
record = add_common_table(connection)   # None if connection is None
text = decode_common_section(raw_section_bytes, "2024-01-01 12:00:00 +0000", record)
print(text)
```

Pass `None` as the record to decode without storing anything. The HIP08
decoders follow the same pattern with `add_oem_type1_table`,
`add_oem_type2_table` and `add_pcie_local_table`.

The Yitian decoder returns a `DdrDumpEvent` whose `reg_msg` is the report;
its timestamp is taken from `now` (a `datetime`), or the current local time:

```python
from rasvendor.yitian import add_ddr_table, decode_yitian_error

event = decode_yitian_error(raw_section_bytes, add_ddr_table(connection))
print(event.timestamp, event.reg_msg)
```

Parsing an Ampere payload:

```python
from rasvendor.ampere_layout import payload_type, parse_payload0, socket_num

if payload_type(raw[0]) == 0:
    payload = parse_payload0(raw)
    print(socket_num(payload.instance))
```

Errors are raised as `ValueError`: a section shorter than its layout, a
HIP08 section whose validity bits are all zero, a Yitian section that is not
a DDR payload, or an unsupported JaguarMicro payload type. A failed insert
is logged and `VendorRecord.step` returns `False`. Unsigned 64-bit values
of 2**63 and above are stored as their signed 64-bit equivalent.

Keeping a window of recent events:

```python
from rasvendor.eventqueue import EventQueue

queue = EventQueue()
queue.push(1700000000, 3)
queue.push(1700000060, 1)
oldest = queue.front()   # None when the queue is empty
queue.pop()              # IndexError when the queue is empty
print(len(queue))
```

## What the package does not do

- Ampere and JaguarMicro sections are only parsed and named; there is no
  text report or SQLite recording for them.
- There is no dispatcher that picks a decoder by section GUID, no reading of
  events from the kernel, and no command-line tool or daemon: the caller
  supplies the raw section bytes and the timestamp.