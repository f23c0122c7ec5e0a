from pathlib import Path

import pytest

from ftpphotos.config import load_config, write_default_config
from ftpphotos.errors import ConfigError


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.yaml")

    assert cfg.ftp.port == 21
    assert cfg.walk.root == "/"
    assert cfg.walk.target_folder == "фотографии"
    assert cfg.walk.name_prefix == "GRP327_"


def test_file_and_overrides_are_merged(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("ftp:\n  host: ftp.example\n  port: 2121\nwalk:\n  max_depth: 8\n", encoding="utf-8")

    cfg = load_config(path, overrides={"ftp": {"password": "secret"}, "server": {"port": 9000}})

    assert cfg.ftp.host == "ftp.example"
    assert cfg.ftp.port == 2121
    assert cfg.ftp.password == "secret"
    assert cfg.walk.max_depth == 8
    assert cfg.server.port == 9000


def test_default_config_file_loads_back(tmp_path: Path) -> None:
    path = write_default_config(tmp_path / "nested" / "config.yaml")

    assert path.exists()
    assert write_default_config(path) == path
    assert load_config(path).walk.target_folder == "фотографии"


@pytest.mark.parametrize(
    "text",
    [
        "ftp:\n  port: 0\n",
        "walk:\n  max_depth: 0\n",
        "walk:\n  legacy_codepage: no-such-codec\n",
        "walk:\n  unknown_key: 1\n",
        "ftp: [1, 2]\n",
        "ftp:\n  host: [unclosed\n",
        "walk:\n  repair_paths: maybe\n",
    ],
)
def test_bad_values_are_rejected(tmp_path: Path, text: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_boolean_strings_are_coerced(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text('ftp:\n  passive: "no"\nwalk:\n  repair_paths: "false"\n', encoding="utf-8")

    cfg = load_config(path)

    assert cfg.ftp.passive is False
    assert cfg.walk.repair_paths is False
