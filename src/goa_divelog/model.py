from __future__ import annotations
import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class FieldType(Enum):
    DIVETIME = "divetime"
    MAXDEPTH = "maxdepth"
    AVGDEPTH = "avgdepth"
    GASMIX_COUNT = "gasmix_count"
    GASMIX = "gasmix"
    SALINITY = "salinity"
    ATMOSPHERIC = "atmospheric"
    TEMPERATURE_SURFACE = "temperature_surface"
    TEMPERATURE_MINIMUM = "temperature_minimum"
    TEMPERATURE_MAXIMUM = "temperature_maximum"
    TANK_COUNT = "tank_count"
    TANK = "tank"
    DIVEMODE = "divemode"


class SampleType(Enum):
    TIME = "time"                # milliseconds
    DEPTH = "depth"              # meters
    TEMPERATURE = "temperature"  # degrees Celsius
    GASMIX = "gasmix"            # gas mix index


class DiveMode(Enum):
    FREEDIVE = "freedive"
    GAUGE = "gauge"
    OC = "oc"


class GasUsage(Enum):
    NONE = "none"
    OXYGEN = "oxygen"
    DILUENT = "diluent"
    SIDEMOUNT = "sidemount"


@dataclass(frozen=True)
class GasMix:
    oxygen: float
    helium: float = 0.0
    usage: GasUsage = GasUsage.NONE
    # always the remainder of oxygen and helium
    nitrogen: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "nitrogen", 1.0 - self.oxygen - self.helium)

    @classmethod
    def from_oxygen(cls, oxygen: float, helium: float = 0.0) -> "GasMix":
        return cls(oxygen=oxygen, helium=helium)


@dataclass(frozen=True)
class DiveDateTime:
    """Dive start time as recorded by the device (local time, no zone)."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int = 0
    timezone: Optional[int] = None

    def to_datetime(self) -> dt.datetime:
        # Raises ValueError for garbage dates (e.g. month 0)
        return dt.datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}T{self.hour:02d}:{self.minute:02d}:{self.second:02d}"


SampleValue = Union[int, float]


@dataclass(frozen=True)
class Sample:
    type: SampleType
    value: SampleValue
