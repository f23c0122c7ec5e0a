from __future__ import annotations

from datetime import datetime, timedelta, timezone
import ftplib
import logging
import re
from typing import Callable

from ftpphotos.config import FtpConfig
from ftpphotos.errors import ListingError, RemoteConnectionError
from ftpphotos.models import RawEntry

log = logging.getLogger(__name__)

MLSD_FACTS = ["type", "size", "modify"]
# Reply codes meaning "command not understood/implemented", not "bad path".
UNSUPPORTED_REPLIES = ("500", "501", "502", "504")

MONTHS = {
    name: idx
    for idx, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}

UNIX_LINE = re.compile(
    r"^(?P<kind>[-dlbcps])\S{9}\S*\s+\d+\s+\S+(?:\s+\S+)?\s+(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+(?P<when>\d{1,2}:\d{2}|\d{4})\s+(?P<name>.+)$"
)
DOS_LINE = re.compile(
    r"^(?P<date>\d{2}-\d{2}-\d{2,4})\s+(?P<time>\d{1,2}:\d{2}\s*(?:[AaPp][Mm])?)\s+"
    r"(?P<size><DIR>|\d+)\s+(?P<name>.+)$"
)


def parse_mlsd_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _recent_date(month: int, day: int, hour: int, minute: int, now: datetime) -> datetime | None:
    # Year-less Unix listings mean "within the last twelve months".
    for year in (now.year, now.year - 1):
        try:
            candidate = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
        except ValueError:
            continue
        if candidate <= now + timedelta(days=1):
            return candidate
    return None


def _parse_unix(match: re.Match[str], now: datetime) -> RawEntry | None:
    month = MONTHS.get(match["month"].lower())
    if month is None:
        return None
    day = int(match["day"])
    when = match["when"]
    try:
        if ":" in when:
            hour, minute = (int(x) for x in when.split(":"))
            stamp = _recent_date(month, day, hour, minute, now)
        else:
            stamp = datetime(int(when), month, day, tzinfo=timezone.utc)
    except ValueError:
        return None
    name = match["name"]
    kind = match["kind"]
    if kind == "l" and " -> " in name:
        name = name.split(" -> ", 1)[0]
    return RawEntry(name=name, is_dir=kind == "d", timestamp=stamp, size=int(match["size"]))


def _parse_dos(match: re.Match[str]) -> RawEntry | None:
    date_fmt = "%m-%d-%Y" if len(match["date"]) == 10 else "%m-%d-%y"
    clock = match["time"].replace(" ", "").upper()
    time_fmt = "%I:%M%p" if clock.endswith(("AM", "PM")) else "%H:%M"
    try:
        stamp = datetime.strptime(f"{match['date']} {clock}", f"{date_fmt} {time_fmt}")
    except ValueError:
        return None
    is_dir = match["size"] == "<DIR>"
    return RawEntry(
        name=match["name"],
        is_dir=is_dir,
        timestamp=stamp.replace(tzinfo=timezone.utc),
        size=0 if is_dir else int(match["size"]),
    )


def parse_list_line(line: str, now: datetime | None = None) -> RawEntry | None:
    """Parse one LIST line in Unix or DOS style; ``None`` for anything else."""
    text = line.rstrip("\r\n")
    if not text or text.lower().startswith("total "):
        return None
    match = UNIX_LINE.match(text)
    if match:
        return _parse_unix(match, now or datetime.now(timezone.utc))
    match = DOS_LINE.match(text)
    if match:
        return _parse_dos(match)
    log.debug("unrecognized LIST line: %r", text)
    return None


def parse_list_lines(lines: list[str], now: datetime | None = None) -> list[RawEntry]:
    now = now or datetime.now(timezone.utc)
    out: list[RawEntry] = []
    for line in lines:
        entry = parse_list_line(line, now)
        if entry is not None:
            out.append(entry)
    return out


class FtpConnection:
    """One FTP session used for the duration of a single retrieval."""

    def __init__(self, config: FtpConfig, ftp_factory: Callable[..., ftplib.FTP] = ftplib.FTP) -> None:
        self.config = config
        self._factory = ftp_factory
        self._ftp: ftplib.FTP | None = None
        self._use_mlsd = True

    @property
    def connected(self) -> bool:
        return self._ftp is not None

    def open(self) -> None:
        if self._ftp is not None:
            return
        cfg = self.config
        try:
            ftp = self._factory(timeout=cfg.timeout, encoding=cfg.encoding)
        except ftplib.all_errors as exc:
            raise RemoteConnectionError(f"cannot create ftp client: {exc}") from exc
        try:
            ftp.connect(cfg.host, cfg.port)
            ftp.login(cfg.user, cfg.password)
            ftp.set_pasv(cfg.passive)
        except ftplib.all_errors as exc:
            ftp.close()
            raise RemoteConnectionError(f"cannot connect to {cfg.host}:{cfg.port}: {exc}") from exc
        self._ftp = ftp
        log.info("connected to ftp://%s@%s:%d", cfg.user, cfg.host, cfg.port)

    def close(self) -> None:
        ftp, self._ftp = self._ftp, None
        if ftp is None:
            return
        try:
            ftp.quit()
        except ftplib.all_errors as exc:
            log.debug("QUIT failed (%s); closing socket", exc)
            ftp.close()
        log.info("disconnected from %s", self.config.host)

    def list_dir(self, path: str) -> list[RawEntry]:
        if self._ftp is None:
            raise ListingError(path, "not connected")
        try:
            if self._use_mlsd:
                try:
                    return self._list_mlsd(path)
                except ftplib.error_perm as exc:
                    if not str(exc).startswith(UNSUPPORTED_REPLIES):
                        raise
                    log.info("server rejected MLSD (%s); using LIST", exc)
                    self._use_mlsd = False
            return self._list_plain(path)
        except ftplib.all_errors as exc:
            raise ListingError(path, str(exc)) from exc
        except UnicodeDecodeError as exc:
            # ftplib decodes listing lines strictly with the control encoding.
            raise ListingError(path, f"undecodable listing: {exc}") from exc

    def _list_mlsd(self, path: str) -> list[RawEntry]:
        assert self._ftp is not None
        out: list[RawEntry] = []
        for name, facts in self._ftp.mlsd(path, facts=MLSD_FACTS):
            kind = facts.get("type", "").lower()
            if kind in ("cdir", "pdir"):
                continue
            try:
                size = int(facts.get("size") or 0)
            except ValueError:
                size = 0
            out.append(
                RawEntry(
                    name=name,
                    is_dir=kind == "dir",
                    timestamp=parse_mlsd_time(facts.get("modify")),
                    size=size,
                )
            )
        return out

    def _list_plain(self, path: str) -> list[RawEntry]:
        assert self._ftp is not None
        lines: list[str] = []
        self._ftp.retrlines(f"LIST {path}", lines.append)
        return parse_list_lines(lines)
