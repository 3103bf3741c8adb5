from __future__ import annotations
import logging
import yaml
from dataclasses import dataclass
from typing import Optional, List, Any, Dict, Union


@dataclass
class InputCfg:
    # glob applied to directory arguments
    pattern: str = "*.bin"
    # log and continue when a dump fails to decode
    skip_invalid: bool = True


@dataclass
class DecoderCfg:
    emit_samples: bool = True
    # include gas mix change events in sample records
    gasmix_changes: bool = True


@dataclass
class LoggingCfg:
    dir: str = "./logs"
    file_prefix: str = "dives"
    # 'regular' keeps per-sample records out of the main file unless
    # whitelisted; 'verbose' emits everything.
    mode: str = "regular"
    verbose_whitelist: Optional[List[str]] = None
    # Dual-file logging: compact main log in `dir`, full log in `dir/debug`.
    dual_file: bool = True
    debug_subdir: Optional[str] = "debug"
    # level for the stdlib diagnostic logger, name or number
    level: Union[str, int] = "INFO"


@dataclass
class AppCfg:
    input: InputCfg
    decoder: DecoderCfg
    logging: LoggingCfg


def _as_bool(d: Dict[str, Any], key: str, default: bool) -> bool:
    v = d.get(key, default)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off"):
            return False
        return default
    if v is None:
        return default
    return bool(v)


def log_level(value: Union[str, int, None]) -> int:
    if isinstance(value, int):
        return value
    s = str(value or "").strip()
    if s.isdigit():
        return int(s)
    lvl = getattr(logging, s.upper(), None)
    return lvl if isinstance(lvl, int) else logging.INFO


def load_config(path: Optional[str] = None) -> AppCfg:
    raw: Dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    inp_raw = dict(raw.get("input") or {})
    inp = InputCfg(
        pattern=str(inp_raw.get("pattern", InputCfg.pattern)),
        skip_invalid=_as_bool(inp_raw, "skip_invalid", InputCfg.skip_invalid),
    )
    # Coerce flags to bool to avoid YAML/ENV string issues
    dec_raw = dict(raw.get("decoder") or {})
    dec = DecoderCfg(
        emit_samples=_as_bool(dec_raw, "emit_samples", DecoderCfg.emit_samples),
        gasmix_changes=_as_bool(dec_raw, "gasmix_changes", DecoderCfg.gasmix_changes),
    )
    log_raw = dict(raw.get("logging") or {})
    if "dual_file" in log_raw:
        log_raw["dual_file"] = _as_bool(log_raw, "dual_file", LoggingCfg.dual_file)
    log = LoggingCfg(**log_raw)
    return AppCfg(input=inp, decoder=dec, logging=log)
