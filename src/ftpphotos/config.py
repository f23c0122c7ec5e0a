from __future__ import annotations

import codecs
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ftpphotos.errors import ConfigError
from ftpphotos.paths import default_config_path

TRUE_WORDS = {"true", "yes", "on", "1"}
FALSE_WORDS = {"false", "no", "off", "0"}


@dataclass(slots=True)
class FtpConfig:
    host: str = "localhost"
    port: int = 21
    user: str = "anonymous"
    password: str = ""
    timeout: float = 30.0
    encoding: str = "utf-8"
    passive: bool = True


@dataclass(slots=True)
class WalkConfig:
    root: str = "/"
    target_folder: str = "фотографии"
    name_prefix: str = "GRP327_"
    max_depth: int = 64
    legacy_codepage: str = "cp1251"
    repair_paths: bool = True


@dataclass(slots=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(slots=True)
class AppConfig:
    ftp: FtpConfig = field(default_factory=FtpConfig)
    walk: WalkConfig = field(default_factory=WalkConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"section {name!r} must be a mapping")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_WORDS:
            return True
        if text in FALSE_WORDS:
            return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _validate(cfg: AppConfig) -> AppConfig:
    if not 0 < cfg.ftp.port < 65536:
        raise ConfigError(f"ftp.port out of range: {cfg.ftp.port}")
    if not 0 <= cfg.server.port < 65536:
        raise ConfigError(f"server.port out of range: {cfg.server.port}")
    if cfg.walk.max_depth < 1:
        raise ConfigError(f"walk.max_depth must be positive: {cfg.walk.max_depth}")
    if not cfg.walk.target_folder:
        raise ConfigError("walk.target_folder must not be empty")
    for name in (cfg.walk.legacy_codepage, cfg.ftp.encoding):
        try:
            codecs.lookup(name)
        except LookupError as exc:
            raise ConfigError(f"unknown encoding: {name}") from exc
    return cfg


def _to_config(data: dict[str, Any]) -> AppConfig:
    try:
        ftp = FtpConfig(**_section(data, "ftp"))
        walk = WalkConfig(**_section(data, "walk"))
        server = ServerConfig(**_section(data, "server"))
        ftp.port = int(ftp.port)
        ftp.timeout = float(ftp.timeout)
        walk.max_depth = int(walk.max_depth)
        server.port = int(server.port)
        ftp.passive = _as_bool(ftp.passive, "ftp.passive")
        walk.repair_paths = _as_bool(walk.repair_paths, "walk.repair_paths")
    except (TypeError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc
    return _validate(AppConfig(ftp=ftp, walk=walk, server=server))


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    path = config_path or default_config_path()
    base: dict[str, Any] = {}
    if path.exists():
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"malformed YAML in {path}: {exc}") from exc
        if isinstance(loaded, dict):
            base = loaded
    if overrides:
        base = _merge(base, overrides)
    return _to_config(base)


def write_default_config(path: Path | None = None) -> Path:
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        return target
    target.write_text(
        yaml.safe_dump(
            {
                "ftp": {
                    "host": "localhost",
                    "port": 21,
                    "user": "anonymous",
                    "password": "",
                    "timeout": 30.0,
                    "encoding": "utf-8",
                    "passive": True,
                },
                "walk": {
                    "root": "/",
                    "target_folder": "фотографии",
                    "name_prefix": "GRP327_",
                    "max_depth": 64,
                    "legacy_codepage": "cp1251",
                    "repair_paths": True,
                },
                "server": {"host": "127.0.0.1", "port": 8080},
            },
            sort_keys=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    return target
