import csv
import os
import pathlib
import subprocess
import sys

import serial

from gps_smoother.sensors import gps_reader
from gps_smoother.smooth_track import main

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]


def write_track(path):
    path.write_text(
        "timestamp,latitude,longitude,altitude\n"
        "0.0,45.0,15.0,100.0\n"
        "1.0,45.0001,15.0001,101.0\n"
        "1.0,45.0002,15.0002,102.0\n"
        "2.0,45.0002,15.0002,102.0\n"
        "3.0,45.0003,15.0003,103.0\n"
    )


def test_replay(tmp_path, capsys):
    track = tmp_path / "walk.csv"
    write_track(track)
    kml = tmp_path / "walk.kml"

    code = main(["--r-value", "29", "replay", str(track), "--out-dir", str(tmp_path / "logs"), "--kml", str(kml)])
    assert code == 0

    out = capsys.readouterr().out
    assert "processed=4" in out
    assert "rejected=1" in out

    log = tmp_path / "logs" / "walk" / "walk.csv"
    with log.open(newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 6  # header + 5 fixes
    assert [r[1] for r in rows[1:]] == ["ok", "ok", "DegenerateIntervalError", "ok", "ok"]
    assert "15.0,45.0,100.0" in kml.read_text()


def test_replay_missing_columns(tmp_path, capsys):
    track = tmp_path / "bad.csv"
    track.write_text("t,lat,lon\n0,1,2\n")
    assert main(["replay", str(track), "--no-csv"]) == 2
    assert "missing column" in capsys.readouterr().out


def test_replay_cli_subprocess(tmp_path):
    track = tmp_path / "walk.csv"
    write_track(track)
    cmd = [
        sys.executable,
        "-m",
        "gps_smoother.smooth_track",
        "--sigma",
        "0.0625",
        "replay",
        str(track),
        "--out-dir",
        str(tmp_path / "out"),
        "--output",
        "cli_run",
    ]
    env = dict(os.environ, PYTHONIOENCODING="utf-8")
    result = subprocess.run(cmd, check=True, capture_output=True, text=True, cwd=REPO_ROOT, env=env)
    assert "Done" in result.stdout
    assert (tmp_path / "out" / "cli_run" / "cli_run.csv").is_file()


def test_live_reports_unavailable_receiver(monkeypatch, capsys):
    def broken(*args, **kwargs):
        raise serial.SerialException("could not open port /dev/missing")

    monkeypatch.setattr(gps_reader.serial, "Serial", broken)
    assert main(["live", "--port", "/dev/missing", "--baudrate", "9600"]) == 1
    assert "GPS receiver unavailable" in capsys.readouterr().out
