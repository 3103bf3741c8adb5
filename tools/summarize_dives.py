import argparse
import json
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional


@dataclass
class DiveStats:
    file: str
    divemode: Optional[str] = None
    divetime_s: Optional[int] = None
    maxdepth_m: Optional[float] = None
    samples: int = 0
    max_sample_depth_m: float = 0.0
    last_t_ms: int = 0
    gas_switches: int = 0
    temps: list = field(default_factory=list)


def parse_ndjson_lines(path: Path) -> Iterable[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        for ln, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                print(f"WARN: Failed to parse line {ln}: {e}")


def collect(path: Path, session_filter: Optional[str] = None):
    dives: Dict[str, DiveStats] = {}
    errors = Counter()
    for rec in parse_ndjson_lines(path):
        if session_filter is not None and rec.get("session_id") != session_filter:
            continue
        rtype = rec.get("type")
        name = rec.get("file") or "?"
        data = rec.get("data") or {}
        if rtype == "dive":
            st = dives.setdefault(name, DiveStats(name))
            st.divemode = data.get("divemode")
            st.divetime_s = data.get("divetime_s")
            st.maxdepth_m = data.get("maxdepth_m")
        elif rtype == "sample":
            st = dives.setdefault(name, DiveStats(name))
            st.samples += 1
            st.max_sample_depth_m = max(st.max_sample_depth_m, float(data.get("depth_m", 0.0)))
            st.last_t_ms = max(st.last_t_ms, int(data.get("t_ms", 0)))
            if "gasmix" in data:
                st.gas_switches += 1
            if "temp_c" in data:
                st.temps.append(float(data["temp_c"]))
        elif rtype == "error":
            errors[f"{rec.get('msg') or 'error'}:{data.get('status', '')}"] += 1
    return dives, errors


def summarize(path: Path, session_filter: Optional[str] = None) -> None:
    dives, errors = collect(path, session_filter)
    print(f"File: {path}")
    if session_filter is not None:
        print(f"Session filter: {session_filter}")
    print(f"Dives: {len(dives)}")
    for name in sorted(dives):
        st = dives[name]
        print(f"  {name}: mode={st.divemode} divetime={st.divetime_s}s maxdepth={st.maxdepth_m}m")
        if st.samples:
            print(f"    samples: {st.samples}, profile span {st.last_t_ms/1000:.0f}s, "
                  f"deepest sample {st.max_sample_depth_m:.1f}m, gas events {st.gas_switches}")
            if st.temps:
                print(f"    temperature: min {min(st.temps):.1f} max {max(st.temps):.1f}")
    if errors:
        print("Errors (grouped):")
        for k, v in errors.most_common(10):
            print(f"  {k}: {v}")


def main() -> None:
    ap = argparse.ArgumentParser(description="Summarize decoded dive NDJSON logs")
    ap.add_argument("path", type=Path, help="Path to dives_YYYYMMDD.ndjson (use the debug log for samples)")
    ap.add_argument("--session", type=str, default=None, help="Only include records with this session_id")
    args = ap.parse_args()
    summarize(args.path, session_filter=args.session)


if __name__ == "__main__":
    main()
