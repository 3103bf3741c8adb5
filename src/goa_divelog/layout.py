from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import DataFormatError

# Dive mode codes, as stored at offset 2 of the logbook section
SCUBA = 0
NITROX = 1
FREEDIVE = 2
GAUGE = 3

SZ_ID_MIN = 9
SZ_LOGBOOK_MIN = 23

NGASMIXES = 2


@dataclass(frozen=True)
class Layout:
    """Offsets of the summary fields inside the mode-specific header.

    A field set to None is not recorded in that dive mode.
    """
    headersize: int
    datetime: int
    divetime: Optional[int]
    gasmix: Optional[int]
    atmospheric: Optional[int]
    maxdepth: Optional[int]
    avgdepth: Optional[int]
    temperature: Optional[int]


SCUBA_LAYOUT = Layout(
    headersize=92,
    datetime=12,
    divetime=20,
    gasmix=26,
    atmospheric=30,
    maxdepth=73,
    avgdepth=75,
    temperature=77,
)

NITROX_LAYOUT = Layout(
    headersize=92,
    datetime=12,
    divetime=20,
    gasmix=26,
    atmospheric=30,
    maxdepth=73,
    avgdepth=75,
    temperature=77,
)

FREEDIVE_LAYOUT = Layout(
    headersize=38,
    datetime=12,
    divetime=20,
    gasmix=None,
    atmospheric=None,
    maxdepth=23,
    avgdepth=None,
    temperature=25,
)

GAUGE_LAYOUT = Layout(
    headersize=40,
    datetime=12,
    divetime=20,
    gasmix=None,
    atmospheric=22,
    maxdepth=24,
    avgdepth=26,
    temperature=28,
)

# Indexed by mode code
LAYOUTS: Tuple[Layout, ...] = (SCUBA_LAYOUT, NITROX_LAYOUT, FREEDIVE_LAYOUT, GAUGE_LAYOUT)


def get_layout(divemode: int) -> Layout:
    if not 0 <= divemode < len(LAYOUTS):
        raise DataFormatError(f"Invalid dive mode ({divemode}).")
    return LAYOUTS[divemode]


def sample_interval(divemode: int) -> int:
    """Seconds between two depth records."""
    return 2 if divemode == FREEDIVE else 5
