import csv
import math

import pytest

from gps_smoother.CSVLogger import HEADER, CSVLogger
from gps_smoother.KMLLogger import KMLLogger
from gps_smoother.fix import Fix
from gps_smoother.nav_utils import correction_distance, haversine_distance
from gps_smoother.track_parser import read_track


def test_read_track(tmp_path):
    path = tmp_path / "track.csv"
    path.write_text(
        "timestamp , latitude, longitude, altitude, speed\n"
        "0.0, 38.9412, -92.3185, 230.0, 1.5\n"
        "1.0, 38.9413, -92.3186, , \n"
    )
    fixes = read_track(path)
    assert len(fixes) == 2
    assert fixes[0].latitude == pytest.approx(38.9412)
    assert fixes[0].longitude == pytest.approx(-92.3185)
    assert fixes[0].altitude == 230.0
    assert fixes[0].speed == 1.5
    assert fixes[1].altitude == 0.0
    assert fixes[1].speed == -1.0
    assert fixes[1].timestamp == 1.0


def test_read_track_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("time,lat,lon\n0,1,2\n")
    with pytest.raises(ValueError, match="missing column"):
        read_track(path)


def test_csv_logger_rows_and_unique_names(tmp_path):
    raw = Fix(38.9412, -92.3185, 230.0, timestamp=1.0, horizontal_accuracy=2.0)
    corrected = raw.with_position(38.94121, -92.3185, 230.0)

    logger = CSVLogger("run.csv", base_dir=tmp_path)
    logger.add_point(raw, corrected)
    logger.add_point(raw, None, "DegenerateIntervalError")
    logger.close()

    second = CSVLogger("run", base_dir=tmp_path)
    second.close()
    assert logger.filename == tmp_path / "run" / "run.csv"
    assert second.filename == tmp_path / "run" / "run_run1.csv"

    with open(logger.filename, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == HEADER
    assert rows[1][1] == "ok"
    assert float(rows[1][5]) == pytest.approx(38.94121)
    assert float(rows[1][8]) == pytest.approx(1.112, abs=1e-3)
    assert rows[2][1] == "DegenerateIntervalError"
    assert rows[2][5] == "NULL"


def test_csv_logger_disabled(tmp_path):
    logger = CSVLogger("off", logging=False, base_dir=tmp_path)
    logger.add_point(Fix(1.0, 2.0))
    logger.close()
    assert not (tmp_path / "off").exists()


def test_kml_logger(tmp_path):
    path = tmp_path / "track.kml"
    kml = KMLLogger(str(path))
    kml.add_fix(Fix(38.9412, -92.3185, 230.0))
    kml.add_point(-92.3186, 38.9413)
    kml.close()
    kml.close()
    text = path.read_text()
    assert "-92.3185,38.9412,230.0" in text
    assert "-92.3186,38.9413,0.0" in text
    assert text.count("</kml>") == 1
    assert kml.points == [(-92.3185, 38.9412, 230.0), (-92.3186, 38.9413, 0.0)]


def test_nav_utils():
    # one thousandth of a degree of latitude is about 111 m
    assert haversine_distance(0.0, 0.0, 0.001, 0.0) == pytest.approx(111.19, abs=0.01)
    raw = Fix(0.0, 0.0)
    assert correction_distance(raw, raw) == 0.0
    assert math.isclose(correction_distance(raw, raw.with_position(0.001, 0.0, 0.0)), 111.19, abs_tol=0.01)


def test_kml_logger_escapes_track_name(tmp_path):
    path = tmp_path / "named.kml"
    kml = KMLLogger(str(path), name="Field A & <north> strip")
    kml.close()
    text = path.read_text()
    assert "<name>Field A &amp; &lt;north&gt; strip</name>" in text
