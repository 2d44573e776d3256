"""Tests for the moonphases command line."""

import io

from PIL import Image

from moonphases.cli import main


def test_phase_command(capsys):
    assert main(["phase", "--angle", "-90"]) == 0
    out = capsys.readouterr().out
    assert "Last Quarter (last_quarter)" in out
    assert "50.0% lit" in out


def test_phase_command_japanese(capsys):
    assert main(["--lang", "ja", "phase", "--angle", "180"]) == 0
    assert "満月" in capsys.readouterr().out


def test_svg_command_writes_both_views(tmp_path):
    assert main(["svg", "--angle", "45", "-o", str(tmp_path)]) == 0
    for name in ("orbit-view.svg", "moon-view.svg"):
        data = (tmp_path / name).read_bytes()
        assert data.startswith(b'<?xml version="1.0" standalone="no"?>\r\n')


def test_gif_command_into_directory(tmp_path):
    assert main(["gif", "--frames", "3", "--delay", "50", "-o", str(tmp_path)]) == 0
    data = (tmp_path / "moon-phases.gif").read_bytes()
    with Image.open(io.BytesIO(data)) as gif:
        assert gif.size == (800, 400)
        assert gif.n_frames == 3
