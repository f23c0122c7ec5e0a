from __future__ import annotations

from contextlib import closing
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Callable, Protocol, Sequence

from ftpphotos.config import AppConfig
from ftpphotos.encoding import EncodingNormalizer
from ftpphotos.errors import NoResultsError
from ftpphotos.ftp import FtpConnection
from ftpphotos.models import Photo, RawEntry
from ftpphotos.walker import RemoteTreeWalker, WalkStats

log = logging.getLogger(__name__)


class RemoteConnection(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...

    def list_dir(self, path: str) -> Sequence[RawEntry]: ...


ConnectionFactory = Callable[[], RemoteConnection]


class PhotoService:
    def __init__(self, config: AppConfig, connection_factory: ConnectionFactory | None = None) -> None:
        self.config = config
        self._connection_factory = connection_factory or (lambda: FtpConnection(config.ftp))
        self.last_walk: WalkStats | None = None

    def normalizer(self) -> EncodingNormalizer:
        return EncodingNormalizer(
            wire_encoding=self.config.ftp.encoding,
            legacy_codepage=self.config.walk.legacy_codepage,
            repair=self.config.walk.repair_paths,
        )

    def get_photos(self) -> list[Photo]:
        walk_cfg = self.config.walk
        log.info("collecting %s* from %r folders under %s", walk_cfg.name_prefix, walk_cfg.target_folder, walk_cfg.root)
        with closing(self._connection_factory()) as conn:
            conn.open()
            walker = RemoteTreeWalker(conn.list_dir, self.normalizer(), max_depth=walk_cfg.max_depth)
            try:
                photos = walker.walk(walk_cfg.root, walk_cfg.target_folder, walk_cfg.name_prefix)
            finally:
                self.last_walk = walker.stats
        log.info("walk finished: %d photos, %d failed listings", len(photos), len(walker.stats.failures))
        if not photos:
            raise NoResultsError(
                f"no {walk_cfg.name_prefix}* entries in any {walk_cfg.target_folder!r} folder under {walk_cfg.root}"
            )
        return photos

    def get_photo_info(self, path: str) -> Photo | None:
        target = Path(path)
        if not target.exists():
            log.error("file not found: %s", path)
            return None
        st = target.stat()
        return Photo(
            name=target.name,
            path=path,
            creation_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            size=st.st_size,
        )
