from __future__ import annotations
import os, json, time, pathlib, uuid
from typing import Optional, IO


class NdjsonLogger:
    def __init__(self, directory: str, file_prefix: str, *, dual_file: bool = False, debug_subdir: Optional[str] = None):
        self.dir = pathlib.Path(directory)
        self.dir.mkdir(parents=True, exist_ok=True)
        self.prefix = file_prefix
        self.dual_file = bool(dual_file)
        self.debug_subdir = debug_subdir or "debug"
        self._debug_dir: Optional[pathlib.Path] = None
        self.seq = 0
        self._fh: Optional[IO[str]] = None
        self._rot_day: Optional[str] = None
        self._path: Optional[pathlib.Path] = None
        self._debug_fh: Optional[IO[str]] = None
        self._debug_path: Optional[pathlib.Path] = None
        # 'regular' or 'verbose'. In regular mode sample and debug records
        # only reach the main file when their msg is whitelisted.
        self.mode: str = os.getenv("LOG_MODE", "regular")
        wl = os.getenv("LOG_VERBOSE_WHITELIST", "")
        self.verbose_whitelist = set([s.strip() for s in wl.split(",") if s.strip()])
        self.session_id: str = os.getenv("SESSION_ID") or uuid.uuid4().hex[:12]
        self.pid: int = os.getpid()
        self.rotate()

    @property
    def path(self) -> Optional[pathlib.Path]:
        return self._path

    @property
    def debug_path(self) -> Optional[pathlib.Path]:
        return self._debug_path

    def close(self):
        if self._fh:
            self._fh.close()
            self._fh = None
        if self._debug_fh:
            self._debug_fh.close()
            self._debug_fh = None

    def rotate(self):
        self.close()

        # Time-coded filename, e.g. dives_YYYYMMDD_HHMMSS.ndjson
        stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime(time.time()))
        day = stamp[:8]
        path = self.dir / f"{self.prefix}_{stamp}.ndjson"
        self._fh = open(path, "a", buffering=1, encoding="utf-8")
        self._path = path
        if self.dual_file:
            self._debug_dir = self.dir / self.debug_subdir
            self._debug_dir.mkdir(parents=True, exist_ok=True)
            dpath = self._debug_dir / f"{self.prefix}_debug_{stamp}.ndjson"
            self._debug_fh = open(dpath, "a", buffering=1, encoding="utf-8")
            self._debug_path = dpath
        self._rot_day = day

        # Daily alias (prefix_YYYYMMDD.ndjson) so tools can find today's log
        self._link_alias(path, self.dir / f"{self.prefix}_{day}.ndjson")
        if self.dual_file and self._debug_path and self._debug_dir:
            self._link_alias(self._debug_path, self._debug_dir / f"{self.prefix}_debug_{day}.ndjson")

    @staticmethod
    def _link_alias(target: pathlib.Path, alias: pathlib.Path):
        try:
            if alias.exists() or alias.is_symlink():
                alias.unlink()
            # Prefer hardlink (same filesystem); fall back to symlink
            try:
                os.link(target, alias)
            except OSError:
                os.symlink(str(target), alias)
        except OSError:
            # Non-fatal if alias creation fails
            pass

    def _main_allowed(self, obj: dict) -> bool:
        if self.mode != "regular":
            return True
        if obj.get("type") in ("sample", "debug"):
            msg = obj.get("msg")
            return bool(msg) and msg in self.verbose_whitelist
        return True

    def write(self, obj: dict):
        to_main = self._main_allowed(obj)

        self.seq += 1
        now = time.time()
        lt = time.localtime(now)
        msec = int((now % 1.0) * 1000)
        hms = time.strftime("%H:%M:%S", lt) + f".{msec:03d}"
        obj.setdefault("hms", hms)
        obj.setdefault("seq", self.seq)
        obj.setdefault("schema", "v1")
        obj.setdefault("session_id", self.session_id)
        obj.setdefault("pid", self.pid)
        if time.strftime("%Y%m%d") != self._rot_day:
            self.rotate()

        line = json.dumps(obj) + "\n"
        # Debug file receives every record
        if self.dual_file and self._debug_fh:
            self._debug_fh.write(line)
        if to_main and self._fh:
            self._fh.write(line)
