import struct
from typing import Dict, Iterable, Optional

import pytest

from goa_divelog.layout import LAYOUTS


def le16(u):
    return bytes((u & 0xFF, (u >> 8) & 0xFF))


def depth_rec(depth, gasmix=0, subtype=0):
    return ((((gasmix & 1) << 11) | (depth & 0x7FF)) << 2) | subtype


def time_rec(seconds):
    return ((seconds & 0x3FFF) << 2) | 2


def temp_rec(tenths):
    return ((tenths & 0x3FFF) << 2) | 3


def build_dump(
    mode: int = 0,
    fields: Optional[Dict[int, bytes]] = None,
    records: Iterable[int] = (),
    id_len: int = 9,
    logbook_len: int = 23,
    header_len: Optional[int] = None,
    tail: bytes = b"",
) -> bytes:
    """Synthetic dump: length prefixes, id, logbook, mode header, records."""
    ident = bytes(range(1, id_len + 1))
    logbook = bytearray(logbook_len)
    logbook[2] = mode
    if header_len is None:
        header_len = LAYOUTS[mode].headersize
    header = bytearray(header_len)
    for off, val in (fields or {}).items():
        header[off:off + len(val)] = val
    body = b"".join(struct.pack("<H", r) for r in records)
    return bytes([id_len, logbook_len]) + ident + bytes(logbook) + bytes(header) + body + tail


@pytest.fixture
def make_dump():
    return build_dump
