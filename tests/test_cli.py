"""Tests for exifmv.cli."""

import pytest

from exifmv.cli import EXIT_CONFIG, EXIT_FAILURES, EXIT_OK, build_parser, config_from_args, main
from exifmv.config import DEFAULT_DESTINATION, RenameConfig
from exifmv.errors import ConfigurationError


class TestArguments:

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args(["*.jpg"]))
        assert config == RenameConfig()
        assert config.destination == DEFAULT_DESTINATION
        assert config.dry_run is True
        assert config.strict is True
        assert config.mode == "mv"

    def test_toggles(self):
        args = build_parser().parse_args([
            "*.jpg", "--no-dry-run", "-f", "--no-strict", "--no-hash", "--no-exif",
            "--delete-empty-dirs", "--absolute-symlinks", "--idx-start", "3", "--idx-width", "2",
            "-M", "symlink", "-s", "[/]+", "-r", "x", "-t", "%Y", "-m", "0",
        ])
        config = config_from_args(args)
        assert config.dry_run is False
        assert config.force and not config.strict
        assert not config.use_hash and not config.use_exif
        assert config.delete_empty_dirs and config.absolute_symlinks
        assert (config.idx_start, config.idx_width) == (3, 2)
        assert config.mode == "symlink"
        assert (config.sanitize_pattern, config.replacement) == ("[/]+", "x")
        assert config.timestamp_format == "%Y"
        assert config.max_display_len == 0

    def test_info_shorthand(self):
        assert build_parser().parse_args(["-i", "x"]).mode == "info"


class TestConfigValidation:

    @pytest.mark.parametrize("options", [
        {"sanitize_pattern": "[unclosed"},
        {"idx_width": -1},
        {"idx_start": -5},
        {"mode": "rename"},
        {"max_display_len": -1},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(ConfigurationError):
            RenameConfig(**options).validate()


class TestMain:

    def test_applies_and_exits_zero(self, tmp_path, capsys):
        src = tmp_path / "a.txt"
        src.write_bytes(b"x")
        code = main([str(tmp_path / "*.txt"), "-d", "{{SysPath}}/renamed{{SysDotExt}}", "--no-dry-run"])
        assert code == EXIT_OK
        assert (tmp_path / "renamed.txt").exists()
        assert "Applied:             1" in capsys.readouterr().out

    def test_dry_run_is_default(self, tmp_path, capsys):
        src = tmp_path / "a.txt"
        src.write_bytes(b"x")
        code = main([str(src), "-d", "{{SysPath}}/renamed.txt"])
        assert code == EXIT_OK
        assert src.exists()
        assert "[DRY] MV:" in capsys.readouterr().out

    def test_failure_gives_non_zero_exit(self, tmp_path):
        (tmp_path / "a.txt").write_bytes(b"x")
        (tmp_path / "b.txt").write_bytes(b"y")
        code = main([str(tmp_path / "a.txt"), "-d", "{{SysPath}}/b.txt", "--no-dry-run"])
        assert code == EXIT_FAILURES
        assert (tmp_path / "b.txt").read_bytes() == b"y"

    def test_bad_template_is_fatal(self, tmp_path, capsys):
        src = tmp_path / "a.txt"
        src.write_bytes(b"x")
        code = main([str(src), "-d", "{{SysName", "--no-dry-run"])
        assert code == EXIT_CONFIG
        assert src.exists()
        assert "Error:" in capsys.readouterr().err

    def test_no_matches(self, tmp_path):
        assert main([str(tmp_path / "*.nothing")]) == EXIT_OK

    def test_info_output(self, tmp_path, capsys):
        src = tmp_path / "c.txt"
        src.write_bytes(b"abc")
        assert main(["-i", str(src)]) == EXIT_OK
        out = capsys.readouterr().out
        assert '{{SysName}} "c"' in out
        assert '{{SysSha1}} "a9993e364706816aba3e25717850c26c9cd0d89d"' in out
        assert src.exists()
