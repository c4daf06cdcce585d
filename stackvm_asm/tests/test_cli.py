"""
Tests for the command line interface.
"""

import pytest

from stackvm_asm.__main__ import main


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "prog.asm"
    path.write_text("start:\n    push 5\n    exit 0\n", encoding="utf-8")
    return path


class TestCli:

    def test_assemble_to_file(self, source, tmp_path, capsys):
        output = tmp_path / "prog.v"
        main([str(source), str(output)])
        out = capsys.readouterr().out
        assert f"Successfully assembled {source} to {output}" in out
        assert output.read_bytes() == bytes.fromhex(
            "deadbeef" "050000f0" "00000000" "00000002" "00000002"
        )

    def test_hex_to_stdout(self, source, capsys):
        main([str(source)])
        assert capsys.readouterr().out.strip() == "f0000005\n00000000"

    def test_listing(self, source, capsys):
        main([str(source), "--listing"])
        out = capsys.readouterr().out
        assert "0x0000:   F0000005   push 5" in out

    def test_profile(self, source, tmp_path):
        profile = tmp_path / "target.yaml"
        profile.write_text("name: be\nbyte_order: big\nalignment: 1\n", encoding="utf-8")
        output = tmp_path / "prog.v"
        main([str(source), str(output), "--profile", str(profile)])
        assert output.read_bytes() == bytes.fromhex("deadbeef" "f0000005" "00000000")

    def test_missing_input(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "nope.asm")])
        assert exc.value.code == 1
        assert "Input file not found" in capsys.readouterr().err

    def test_assembly_error_writes_nothing(self, tmp_path, capsys):
        bad = tmp_path / "bad.asm"
        bad.write_text("a:\na:\nexit\n", encoding="utf-8")
        output = tmp_path / "bad.v"
        with pytest.raises(SystemExit) as exc:
            main([str(bad), str(output)])
        assert exc.value.code == 1
        assert "Error: Line 2: Duplicate label 'a'" in capsys.readouterr().err
        assert not output.exists()

    def test_empty_program(self, tmp_path, capsys):
        empty = tmp_path / "empty.asm"
        empty.write_text("# nothing\n", encoding="utf-8")
        output = tmp_path / "empty.v"
        with pytest.raises(SystemExit):
            main([str(empty), str(output)])
        assert "No instructions to assemble" in capsys.readouterr().err
        assert not output.exists()

    def test_bad_profile(self, source, tmp_path, capsys):
        profile = tmp_path / "target.yaml"
        profile.write_text("alignment: 4\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            main([str(source), "--profile", str(profile)])
        assert "Missing required field 'name'" in capsys.readouterr().err

    def test_verbose_prints_target(self, source, capsys):
        main([str(source), "-v"])
        out = capsys.readouterr().out
        assert "Target: stackvm (magic DE AD BE EF, little-endian, align 4)" in out
        assert "Assembly successful: 2 instructions" in out

    def test_non_utf8_input(self, tmp_path, capsys):
        bad = tmp_path / "bad.asm"
        bad.write_bytes(b"push 1\n\xff\xfe\n")
        output = tmp_path / "bad.v"
        with pytest.raises(SystemExit) as exc:
            main([str(bad), str(output)])
        assert exc.value.code == 1
        assert "Error: Line 2: Source is not valid UTF-8 (byte 0xFF)" in capsys.readouterr().err
        assert not output.exists()
