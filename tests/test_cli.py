"""Tests for the command line interface."""

import logging

import pytest

from conftest import build_pak, sample_bsp
from quake_loader.cli import create_parser, main


@pytest.fixture(autouse=True)
def capture_info(caplog):
    caplog.set_level(logging.INFO, logger="quake_loader")


class TestCreateParser:
    def test_defaults(self):
        args = create_parser().parse_args(["pak0.pak"])
        assert args.map is None
        assert not args.entities
        assert not args.no_palette

    def test_verbose_and_quiet_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["x.bsp", "-v", "-q"])


class TestMain:
    def test_bsp_file(self, bsp_path, caplog):
        assert main([str(bsp_path)]) == 0
        assert "Faces: 1" in caplog.text
        assert "Entities: 3" in caplog.text

    def test_pak_map(self, pak_path, caplog):
        assert main([str(pak_path), "--map", "start", "--entities"]) == 0
        assert "info_player_start" in caplog.text
        assert "Textures: 1" in caplog.text

    def test_pak_requires_map(self, pak_path, caplog):
        assert main([str(pak_path)]) == 1
        assert "--map" in caplog.text

    def test_pak_without_palette(self, tmp_path, caplog):
        path = tmp_path / "nopal.pak"
        path.write_bytes(build_pak([("maps/start.bsp", sample_bsp())]))
        assert main([str(path), "-m", "start"]) == 0
        assert "palette.lmp not found" in caplog.text

    def test_classname(self, bsp_path, caplog):
        assert main([str(bsp_path), "--classname", "info_player_start"]) == 0
        assert "angle 90" in caplog.text

    def test_missing_classname(self, bsp_path, caplog):
        assert main([str(bsp_path), "--classname", "monster_shambler"]) == 1
        assert "monster_shambler" in caplog.text

    def test_missing_map(self, pak_path):
        assert main([str(pak_path), "--map", "e9m9"]) == 1

    def test_missing_input(self, tmp_path, caplog):
        assert main([str(tmp_path / "none.bsp")]) == 1
        assert "not found" in caplog.text

    def test_invalid_file(self, tmp_path, caplog):
        path = tmp_path / "junk.bsp"
        path.write_bytes(b"\x01\x02")
        assert main([str(path)]) == 1
        assert "Invalid asset" in caplog.text
