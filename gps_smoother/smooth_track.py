import argparse
import sys
from pathlib import Path

import serial

from gps_smoother.CSVLogger import CSVLogger
from gps_smoother.KMLLogger import KMLLogger
from gps_smoother.config import load_config
from gps_smoother.filters.kalman_filter import smooth
from gps_smoother.nav_utils import correction_distance
from gps_smoother.sensors.gps_reader import read_fixes
from gps_smoother.track_parser import read_track


def fmt(value, digits=8):
    return f"{value:.{digits}f}"


def replay(args):
    config = load_config(args.r_value, args.sigma)
    fixes = read_track(args.input)
    print(f"[KF] Replaying {len(fixes)} fixes from {args.input} (r={config.r_value}, sigma={config.sigma})")

    csv_logger = CSVLogger(args.output or Path(args.input).stem, not args.no_csv, base_dir=args.out_dir)
    kml_logger = KMLLogger(args.kml) if args.kml else None

    processed, rejected, corrections = 0, 0, []
    try:
        for raw, corrected, error in smooth(fixes, config):
            if error is not None:
                rejected += 1
                print(f"[KF] ⚠️ Rejected fix at {raw.timestamp}: {error}")
                csv_logger.add_point(raw, None, type(error).__name__)
                continue
            processed += 1
            corrections.append(correction_distance(raw, corrected))
            csv_logger.add_point(raw, corrected)
            if kml_logger:
                kml_logger.add_fix(corrected)
    finally:
        csv_logger.close()
        if kml_logger:
            kml_logger.close()

    mean_correction = sum(corrections) / len(corrections) if corrections else 0.0
    print(f"[KF] ✅ Done | processed={processed} | rejected={rejected} | mean correction={mean_correction:.3f} m")
    return 0 if processed else 1


def live(args):
    config = load_config(args.r_value, args.sigma)
    print(f"[KF] Live smoothing (r={config.r_value}, sigma={config.sigma})")
    try:
        for raw, corrected, error in smooth(read_fixes(args.port, args.baudrate, args.debug), config):
            if error is not None:
                print(f"[KF] ⚠️ Rejected fix at {raw.timestamp}: {error}")
                continue
            print(f"[KF] 🛰️ {raw.timestamp} | lat={fmt(corrected.latitude)} lon={fmt(corrected.longitude)} "
                  f"alt={corrected.altitude:.2f} | moved {correction_distance(raw, corrected):.2f} m")
    except serial.SerialException as e:
        print(f"[KF] ❌ GPS receiver unavailable: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n[KF] Stopping live smoothing...")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Kalman smoothing for GPS fixes")
    parser.add_argument("--r-value", type=float, default=None, help="Measurement noise (default: GPS_KF_R_VALUE or 29.0)")
    parser.add_argument("--sigma", type=float, default=None, help="Acceleration noise variance (default: GPS_KF_SIGMA or 0.0625)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_replay = sub.add_parser("replay", help="Smooth a recorded track CSV")
    p_replay.add_argument("input", type=Path, help="CSV with timestamp, latitude, longitude[, altitude] columns")
    p_replay.add_argument("--output", default=None, help="Name of the output log (default: input file name)")
    p_replay.add_argument("--out-dir", type=Path, default=Path("CSV_files"), help="Directory for CSV logs")
    p_replay.add_argument("--kml", type=Path, default=None, help="Also write the smoothed track as KML")
    p_replay.add_argument("--no-csv", action="store_true", help="Do not write a CSV log")
    p_replay.set_defaults(func=replay)

    p_live = sub.add_parser("live", help="Smooth fixes from the serial GPS receiver")
    p_live.add_argument("--port", default=None, help="Serial port (default: RTK_PORT)")
    p_live.add_argument("--baudrate", type=int, default=None, help="Baudrate (default: RTK_BAUDRATE or 9600)")
    p_live.add_argument("--debug", action="store_true", help="Print every NMEA line")
    p_live.set_defaults(func=live)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ValueError as e:
        print(f"[KF] ❌ {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
