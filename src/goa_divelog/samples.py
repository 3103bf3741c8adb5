from __future__ import annotations
import struct
from typing import Iterator, Optional

from .layout import Layout, SCUBA, NITROX, sample_interval
from .model import Sample, SampleType

# Record types (low two bits of each 16-bit record)
DEPTH = 0
DEPTH2 = 1
TIME = 2
TEMPERATURE = 3

_REC = struct.Struct("<H")


def iter_samples(data, headersize: int, layout: Layout, divemode: int) -> Iterator[Sample]:
    """Decode the packed sample records that follow the mode-specific header.

    Yields samples in time order. Each completed record produces a TIME
    sample, then an optional TEMPERATURE, then DEPTH, then (scuba/nitrox only)
    a GASMIX sample when the selected mix changed. A trailing odd byte is
    ignored.
    """
    size = len(data)
    interval = sample_interval(divemode)
    track_gasmix = divemode in (SCUBA, NITROX)

    time = 0
    depth = 0
    gasmix = 0
    gasmix_previous: Optional[int] = None
    temperature = 0
    have_temperature = False

    offset = headersize + layout.headersize
    while offset + 2 <= size:
        raw, = _REC.unpack_from(data, offset)
        offset += 2
        rtype = raw & 0x0003
        value = (raw & 0xFFFC) >> 2

        if rtype == DEPTH or rtype == DEPTH2:
            depth = value & 0x07FF
            gasmix = (value & 0x0800) >> 11
            time += interval
        elif rtype == TEMPERATURE:
            temperature = value
            have_temperature = True
            continue
        else:
            surftime = value
            if surftime > interval:
                # Bridge the gap with a surface point one interval later
                surftime -= interval
                time += interval
                yield Sample(SampleType.TIME, time * 1000)
                yield Sample(SampleType.DEPTH, 0.0)
            time += surftime
            depth = 0

        yield Sample(SampleType.TIME, time * 1000)

        if have_temperature:
            yield Sample(SampleType.TEMPERATURE, temperature / 10.0)
            have_temperature = False

        yield Sample(SampleType.DEPTH, depth / 10.0)

        if track_gasmix and gasmix != gasmix_previous:
            yield Sample(SampleType.GASMIX, gasmix)
            gasmix_previous = gasmix
