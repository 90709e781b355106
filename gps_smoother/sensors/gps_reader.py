import math
from datetime import datetime, timedelta, timezone

import pynmea2
import serial

from gps_smoother.config import serial_baudrate, serial_port
from gps_smoother.fix import Fix

# Sentence time this far ahead of the host clock belongs to the previous UTC day
MIDNIGHT_ROLLOVER = timedelta(hours=12)


def estimate_precision_m(hdop, gps_qual):
    """
    Rough horizontal precision in metres from the GGA fix quality and HDOP.

    gps_qual  Meaning
    5         RTK float
    4         RTK fixed
    2         DGPS
    1         Autonomous GPS
    """
    try:
        hdop = float(hdop)
    except (ValueError, TypeError):
        return math.nan

    gps_qual = str(gps_qual)
    if gps_qual == "5":
        return 0.01
    elif gps_qual == "4":
        return 0.02
    elif gps_qual == "2":
        return hdop * 2.0
    elif gps_qual == "1":
        return hdop * 5.0
    else:
        return math.nan


def fix_from_gga(msg, date=None, now=None):
    """
    Convert a parsed GGA sentence into a Fix, or None when the receiver has no position.

    GGA only carries the UTC time of day. Without an explicit date the host
    UTC date is used, stepping back a day when the sentence time is still
    before midnight but the host clock has already rolled over.
    """
    if not msg.gps_qual or not msg.lat or not msg.lon:
        return None

    now = now or datetime.now(timezone.utc)
    if msg.timestamp is not None:
        timestamp = datetime.combine(date or now.date(), msg.timestamp)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        if date is None and timestamp - now > MIDNIGHT_ROLLOVER:
            timestamp -= timedelta(days=1)
    else:
        timestamp = now

    precision = estimate_precision_m(msg.horizontal_dil, msg.gps_qual)
    return Fix(
        latitude=msg.latitude,
        longitude=msg.longitude,
        altitude=float(msg.altitude) if msg.altitude is not None else 0.0,
        timestamp=timestamp,
        horizontal_accuracy=-1.0 if math.isnan(precision) else precision,
    )


def parse_fix(line, date=None, now=None):
    """Parse one NMEA line. Anything that is not a usable GGA sentence gives None."""
    line = line.strip()
    if not line.startswith("$"):
        return None
    try:
        msg = pynmea2.parse(line)
    except pynmea2.ParseError:
        return None
    if not isinstance(msg, pynmea2.types.talker.GGA):
        return None
    return fix_from_gga(msg, date, now)


def read_fixes(port=None, baudrate=None, debug=False):
    """Yield fixes from the receiver on the serial port until it is closed or the read fails."""
    port = port or serial_port()
    baudrate = baudrate or serial_baudrate()
    with serial.Serial(port, baudrate=baudrate, timeout=1) as ser:
        print(f"[GPS] Listening on {port} @ {baudrate}")
        while True:
            try:
                raw = ser.readline()
            except serial.SerialException as e:
                print(f"[GPS] Read error: {e}")
                return
            line = raw.decode("ascii", errors="replace")
            fix = parse_fix(line)
            if debug:
                print(f"[GPS] {line.strip()} -> {fix}")
            if fix is not None:
                yield fix


def get_latest_fix(port=None, baudrate=None, debug=False):
    fixes = read_fixes(port, baudrate, debug)
    try:
        return next(fixes, None)
    except serial.SerialException as e:
        print(f"[GPS] Unable to open serial port: {e}")
        return None
    finally:
        fixes.close()
