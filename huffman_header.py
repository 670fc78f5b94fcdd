import struct
from typing import Tuple

from huffman import FrequencyTable, MalformedHeaderError, MAX_SYMBOL, PSEUDO_EOF

# [entry_count][(symbol, count) x entry_count], big-endian
COUNT_FORMAT = ">H"
ENTRY_FORMAT = ">HQ"
COUNT_SIZE = struct.calcsize(COUNT_FORMAT)
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)
MAX_ENTRIES = MAX_SYMBOL + 1


def header_size(entry_count: int) -> int:
    return COUNT_SIZE + entry_count * ENTRY_SIZE

def write_header(frequency_table: FrequencyTable) -> bytes:
    """
    Serialize the table as an entry count followed by (symbol, count) pairs.

    Pairs go out in ascending symbol order, so two tables with the same
    contents always produce the same header.
    """
    if not 0 < len(frequency_table) <= MAX_ENTRIES:
        raise ValueError(f"frequency table must have 1..{MAX_ENTRIES} entries, got {len(frequency_table)}")

    parts = [struct.pack(COUNT_FORMAT, len(frequency_table))]
    for symbol in sorted(frequency_table):
        if not 0 <= symbol <= MAX_SYMBOL:
            raise ValueError(f"symbol out of range: {symbol}")
        parts.append(struct.pack(ENTRY_FORMAT, symbol, frequency_table[symbol]))
    return b"".join(parts)

def read_header(data: bytes) -> Tuple[FrequencyTable, int]:
    """
    Parse a header from the start of `data`.

    Returns the table, ordered by ascending symbol, and the number of bytes
    consumed. Raises MalformedHeaderError on anything that could not have
    come from write_header for a real source.
    """
    if len(data) < COUNT_SIZE:
        raise MalformedHeaderError("artifact too short to hold an entry count")

    (entry_count,) = struct.unpack_from(COUNT_FORMAT, data, 0)
    if not 0 < entry_count <= MAX_ENTRIES:
        raise MalformedHeaderError(f"entry count {entry_count} outside 1..{MAX_ENTRIES}")

    size = header_size(entry_count)
    if len(data) < size:
        raise MalformedHeaderError(
            f"header declares {entry_count} entries ({size} bytes) but only {len(data)} bytes available"
        )

    entries = {}
    for symbol, count in struct.iter_unpack(ENTRY_FORMAT, data[COUNT_SIZE:size]):
        if symbol > MAX_SYMBOL:
            raise MalformedHeaderError(f"symbol {symbol} outside 0..{MAX_SYMBOL}")
        if symbol in entries:
            raise MalformedHeaderError(f"symbol {symbol} appears twice")
        entries[symbol] = count

    if PSEUDO_EOF not in entries:
        raise MalformedHeaderError("header has no end-of-stream entry")

    table: FrequencyTable = {symbol: entries[symbol] for symbol in sorted(entries)}
    return table, size
