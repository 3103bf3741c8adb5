from __future__ import annotations
import logging
import struct
from typing import Any, Callable, Dict, Iterator, Optional

from .errors import DataFormatError, InvalidArgumentError, UnsupportedError
from .layout import (
    FREEDIVE, GAUGE, NGASMIXES, NITROX, SCUBA, SZ_ID_MIN, SZ_LOGBOOK_MIN, Layout, get_layout,
)
from .model import DiveDateTime, DiveMode, FieldType, GasMix, Sample, SampleType
from .samples import iter_samples

_U16 = struct.Struct("<H")

_SampleCallback = Callable[[SampleType, Any, Any], None]


def _u16le(data, offset: int) -> int:
    return _U16.unpack_from(data, offset)[0]


class GoaParser:
    """Parser for a single Cressi Goa dive dump.

    The header is validated once here; afterwards the object is read-only and
    `get_field`, `get_datetime` and `samples` may be called in any order.
    The caller must not modify `data` while the parser is in use.
    """

    def __init__(self, data, logger: Optional[logging.Logger] = None):
        self.log = logger or logging.getLogger("goa_divelog")
        if data is None:
            raise InvalidArgumentError("No dive data given.")
        try:
            view = memoryview(data).cast("B")
        except TypeError as e:
            raise InvalidArgumentError(f"Dive data is not a byte buffer: {e}") from e

        size = len(view)
        if size < 2:
            self._fail(f"Invalid dive length ({size}).")

        id_len = view[0]
        logbook_len = view[1]
        if id_len < SZ_ID_MIN or logbook_len < SZ_LOGBOOK_MIN:
            self._fail(f"Invalid id or logbook length ({id_len} {logbook_len}).")

        if size < 2 + id_len + logbook_len:
            self._fail(f"Invalid dive length ({size}).")

        # Dive mode lives at offset 2 of the logbook section
        divemode = view[2 + id_len + 2]
        try:
            layout = get_layout(divemode)
        except DataFormatError as e:
            self.log.error(str(e))
            raise

        headersize = 2 + id_len + logbook_len
        if size < headersize + layout.headersize:
            self._fail(f"Invalid dive length ({size}).")

        self._data = view
        self._id_len = id_len
        self._layout = layout
        self._headersize = headersize
        self._divemode = divemode

    def _fail(self, msg: str):
        self.log.error(msg)
        raise DataFormatError(msg)

    @property
    def data(self) -> memoryview:
        return self._data

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def headersize(self) -> int:
        return self._headersize

    @property
    def divemode(self) -> int:
        return self._divemode

    @property
    def id_bytes(self) -> memoryview:
        return self._data[2:2 + self._id_len]

    @property
    def logbook_bytes(self) -> memoryview:
        return self._data[2 + self._id_len:self._headersize]

    def _u16(self, offset: int) -> int:
        return _u16le(self._data, self._headersize + offset)

    def get_datetime(self) -> DiveDateTime:
        p = self._headersize + self._layout.datetime
        d = self._data
        return DiveDateTime(
            year=_u16le(d, p),
            month=d[p + 2],
            day=d[p + 3],
            hour=d[p + 4],
            minute=d[p + 5],
            second=0,
            timezone=None,
        )

    def gasmix_count(self) -> int:
        gasmix = self._layout.gasmix
        if gasmix is None:
            return 0
        base = self._headersize + gasmix
        count = 0
        for i in range(NGASMIXES):
            if self._data[base + 2 * i + 1] == 0:
                break
            count += 1
        return count

    def get_field(self, field: FieldType, index: int = 0):
        """Return one summary field.

        Raises UnsupportedError when the field is not recorded in this dive
        mode (or not recorded by the device at all).
        """
        layout = self._layout

        if field == FieldType.DIVETIME:
            return self._u16(_require(layout.divetime))
        if field == FieldType.MAXDEPTH:
            return self._u16(_require(layout.maxdepth)) / 10.0
        if field == FieldType.AVGDEPTH:
            return self._u16(_require(layout.avgdepth)) / 10.0
        if field == FieldType.TEMPERATURE_MINIMUM:
            return self._u16(_require(layout.temperature)) / 10.0
        if field == FieldType.ATMOSPHERIC:
            return self._u16(_require(layout.atmospheric)) / 1000.0
        if field == FieldType.GASMIX_COUNT:
            return self.gasmix_count()
        if field == FieldType.GASMIX:
            if not 0 <= index < self.gasmix_count():
                raise UnsupportedError(f"No gas mix #{index}.")
            o2 = self._data[self._headersize + layout.gasmix + 2 * index + 1]
            return GasMix.from_oxygen(o2 / 100.0)
        if field == FieldType.DIVEMODE:
            if self._divemode in (SCUBA, NITROX):
                return DiveMode.OC
            if self._divemode == GAUGE:
                return DiveMode.GAUGE
            if self._divemode == FREEDIVE:
                return DiveMode.FREEDIVE
            raise DataFormatError(f"Unknown dive mode ({self._divemode}).")
        raise UnsupportedError(f"Field {field} not supported.")

    def summary(self) -> Dict[str, Any]:
        """All fields available in this dive mode, as plain JSON-able values."""
        out: Dict[str, Any] = {
            "datetime": self.get_datetime().isoformat(),
            "divemode": self.get_field(FieldType.DIVEMODE).value,
        }
        for name, field in (
            ("divetime_s", FieldType.DIVETIME),
            ("maxdepth_m", FieldType.MAXDEPTH),
            ("avgdepth_m", FieldType.AVGDEPTH),
            ("temperature_min_c", FieldType.TEMPERATURE_MINIMUM),
            ("atmospheric_bar", FieldType.ATMOSPHERIC),
        ):
            try:
                out[name] = self.get_field(field)
            except UnsupportedError:
                continue
        out["gasmixes"] = [
            {"o2": mix.oxygen, "he": mix.helium, "n2": mix.nitrogen}
            for mix in (self.get_field(FieldType.GASMIX, i) for i in range(self.gasmix_count()))
        ]
        return out

    def samples(self) -> Iterator[Sample]:
        """Fresh pass over the sample records, from the start."""
        return iter_samples(self._data, self._headersize, self._layout, self._divemode)

    def samples_foreach(self, callback: Optional[_SampleCallback], userdata: Any = None) -> None:
        for sample in self.samples():
            if callback:
                callback(sample.type, sample.value, userdata)


def _require(offset: Optional[int]) -> int:
    if offset is None:
        raise UnsupportedError("Field not recorded in this dive mode.")
    return offset
