import json

import pytest

from goa_divelog.config import AppCfg, DecoderCfg, InputCfg, LoggingCfg
from goa_divelog.dump import DiveDumper, expand_paths, group_samples, run
from goa_divelog.errors import DataFormatError
from goa_divelog.layout import GAUGE, SCUBA
from goa_divelog.model import Sample, SampleType

from conftest import build_dump, depth_rec, le16, temp_rec, time_rec


def make_cfg(tmp_path, **kw):
    return AppCfg(
        input=InputCfg(skip_invalid=kw.pop("skip_invalid", True)),
        decoder=DecoderCfg(**kw),
        logging=LoggingCfg(dir=str(tmp_path / "logs"), file_prefix="dives", mode="regular", dual_file=True),
    )


def read_records(d):
    out = {}
    for f in d.glob("*.ndjson"):
        for line in f.read_text(encoding="utf-8").splitlines():
            if line.strip():
                obj = json.loads(line)
                out[obj["seq"]] = obj
    return [out[k] for k in sorted(out)]


def test_group_samples():
    stream = [
        Sample(SampleType.TIME, 5000), Sample(SampleType.TEMPERATURE, 21.0),
        Sample(SampleType.DEPTH, 3.0), Sample(SampleType.GASMIX, 0),
        Sample(SampleType.TIME, 10000), Sample(SampleType.DEPTH, 4.0),
    ]
    assert list(group_samples(stream)) == [
        {"t_ms": 5000, "temp_c": 21.0, "depth_m": 3.0, "gasmix": 0},
        {"t_ms": 10000, "depth_m": 4.0},
    ]
    assert list(group_samples(stream, gasmix_changes=False))[0] == {"t_ms": 5000, "temp_c": 21.0, "depth_m": 3.0}
    assert list(group_samples([])) == []


def test_expand_paths(tmp_path):
    (tmp_path / "a.bin").write_bytes(b"")
    (tmp_path / "b.bin").write_bytes(b"")
    (tmp_path / "c.txt").write_bytes(b"")
    single = tmp_path / "c.txt"
    got = expand_paths([str(tmp_path), str(single)], "*.bin")
    assert [p.name for p in got] == ["a.bin", "b.bin", "c.txt"]


def test_dump_dives(tmp_path):
    dumps = tmp_path / "dumps"
    dumps.mkdir()
    (dumps / "dive1.bin").write_bytes(build_dump(
        SCUBA,
        fields={12: le16(2023) + bytes([8, 1, 10, 0]), 20: le16(600), 26: bytes([0, 21, 0, 0]), 73: le16(153)},
        records=[temp_rec(240), depth_rec(100), depth_rec(153), time_rec(5)],
    ))
    (dumps / "broken.bin").write_bytes(bytes([3, 23]) + bytes(200))

    dumper = DiveDumper(make_cfg(tmp_path))
    failed = dumper.run([str(dumps)])
    dumper.close()
    assert failed == 1
    assert dumper.decoded == 1

    logs = tmp_path / "logs"
    main = read_records(logs)
    assert [r["type"] for r in main] == ["error", "dive"]
    err, dive = main
    assert err["file"] == "broken.bin"
    assert err["data"]["status"] == "dataformat"
    assert dive["file"] == "dive1.bin"
    assert dive["data"]["divemode"] == "oc"
    assert dive["data"]["divetime_s"] == 600
    assert dive["data"]["maxdepth_m"] == pytest.approx(15.3)
    assert dive["data"]["datetime"] == "2023-08-01T10:00:00"
    assert dive["data"]["gasmixes"] == [{"o2": 0.21, "he": 0.0, "n2": pytest.approx(0.79)}]

    samples = [r["data"] for r in read_records(logs / "debug") if r["type"] == "sample"]
    assert samples == [
        {"t_ms": 5000, "temp_c": 24.0, "depth_m": 10.0, "gasmix": 0},
        {"t_ms": 10000, "depth_m": 15.3},
        {"t_ms": 15000, "depth_m": 0.0},
    ]


def test_no_samples_when_disabled(tmp_path):
    p = tmp_path / "g.bin"
    p.write_bytes(build_dump(GAUGE, records=[depth_rec(10)]))
    dumper = DiveDumper(make_cfg(tmp_path, emit_samples=False))
    assert dumper.decode_file(p) is True
    dumper.close()
    types = [r["type"] for r in read_records(tmp_path / "logs" / "debug")]
    assert types == ["dive"]


def test_strict_mode_raises(tmp_path):
    p = tmp_path / "bad.bin"
    p.write_bytes(b"\x09")
    dumper = DiveDumper(make_cfg(tmp_path, skip_invalid=False))
    with pytest.raises(DataFormatError):
        dumper.decode_file(p)
    dumper.close()
    assert dumper.failed == 1


def test_directory_matching_pattern_is_skipped(tmp_path):
    dumps = tmp_path / "dumps"
    dumps.mkdir()
    (dumps / "a.bin").write_bytes(build_dump(GAUGE, records=[depth_rec(10)]))
    (dumps / "sub.bin").mkdir()
    assert [p.name for p in expand_paths([str(dumps)], "*.bin")] == ["a.bin"]

    dumper = DiveDumper(make_cfg(tmp_path))
    assert dumper.run([str(dumps)]) == 0
    dumper.close()
    assert dumper.decoded == 1


def test_unreadable_file_is_logged_and_skipped(tmp_path):
    good = tmp_path / "good.bin"
    good.write_bytes(build_dump(GAUGE))
    missing = tmp_path / "missing.bin"
    dumper = DiveDumper(make_cfg(tmp_path))
    assert dumper.run([str(missing), str(good)]) == 1
    dumper.close()
    assert dumper.decoded == 1

    main = read_records(tmp_path / "logs")
    assert [r["type"] for r in main] == ["error", "dive"]
    assert main[0]["msg"] == "read_failed"
    assert main[0]["file"] == "missing.bin"
    assert main[0]["data"]["status"] == "io"


def test_unreadable_file_raises_in_strict_mode(tmp_path):
    dumper = DiveDumper(make_cfg(tmp_path, skip_invalid=False))
    with pytest.raises(OSError):
        dumper.decode_file(tmp_path / "missing.bin")
    dumper.close()
    assert dumper.failed == 1


def test_module_run_closes_logger(tmp_path):
    p = tmp_path / "g.bin"
    p.write_bytes(build_dump(GAUGE, records=[depth_rec(10)]))
    assert run(make_cfg(tmp_path), [str(p)]) == 0
    types = [r["type"] for r in read_records(tmp_path / "logs" / "debug")]
    assert types == ["dive", "sample"]
