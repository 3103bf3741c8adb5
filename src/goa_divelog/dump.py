from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .config import AppCfg
from .errors import DecoderError
from .logs import NdjsonLogger
from .model import Sample, SampleType
from .parser import GoaParser

logger = logging.getLogger(__name__)


def group_samples(samples: Iterable[Sample], gasmix_changes: bool = True) -> Iterator[Dict[str, Any]]:
    """Fold the flat sample stream into one dict per timestamp."""
    cur: Optional[Dict[str, Any]] = None
    for s in samples:
        if s.type == SampleType.TIME:
            if cur is not None:
                yield cur
            cur = {"t_ms": s.value}
        elif cur is None:
            continue
        elif s.type == SampleType.DEPTH:
            cur["depth_m"] = s.value
        elif s.type == SampleType.TEMPERATURE:
            cur["temp_c"] = s.value
        elif s.type == SampleType.GASMIX and gasmix_changes:
            cur["gasmix"] = s.value
    if cur is not None:
        yield cur


def expand_paths(paths: Iterable[str], pattern: str) -> List[Path]:
    out: List[Path] = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            out.extend(sorted(f for f in path.glob(pattern) if f.is_file()))
        else:
            out.append(path)
    return out


class DiveDumper:
    def __init__(self, cfg: AppCfg, ndjson: Optional[NdjsonLogger] = None):
        self.cfg = cfg
        lc = cfg.logging
        self.logger = ndjson or NdjsonLogger(lc.dir, lc.file_prefix, dual_file=lc.dual_file, debug_subdir=lc.debug_subdir)
        if ndjson is None:
            self.logger.mode = lc.mode or self.logger.mode
            if lc.verbose_whitelist:
                self.logger.verbose_whitelist.update(lc.verbose_whitelist)
        self.decoded = 0
        self.failed = 0

    def _failed(self, path: Path, msg: str, data: Dict[str, Any], err: Exception):
        self.failed += 1
        self.logger.write({"type": "error", "msg": msg, "file": path.name, "data": data})
        if not self.cfg.input.skip_invalid:
            raise err
        logger.warning("skipping %s: %s", path, err)

    def decode_file(self, path: Path) -> bool:
        try:
            data = path.read_bytes()
        except OSError as e:
            self._failed(path, "read_failed", {"status": "io", "error": str(e)}, e)
            return False
        try:
            parser = GoaParser(data, logger=logger)
            summary = parser.summary()
        except DecoderError as e:
            self._failed(path, "decode_failed", {"status": e.status, "error": str(e), "size": len(data)}, e)
            return False

        self.logger.write({"type": "dive", "msg": "summary", "file": path.name, "data": summary})
        if self.cfg.decoder.emit_samples:
            n = 0
            for group in group_samples(parser.samples(), self.cfg.decoder.gasmix_changes):
                self.logger.write({"type": "sample", "msg": "sample", "file": path.name, "data": group})
                n += 1
            logger.debug("%s: %d samples", path.name, n)
        self.decoded += 1
        return True

    def run(self, paths: Iterable[str]) -> int:
        for path in expand_paths(paths, self.cfg.input.pattern):
            self.decode_file(path)
        logger.info("decoded %d dive(s), %d failed", self.decoded, self.failed)
        return self.failed

    def close(self):
        self.logger.close()


def run(cfg: AppCfg, paths: Iterable[str]) -> int:
    dumper = DiveDumper(cfg)
    try:
        return dumper.run(paths)
    finally:
        dumper.close()
