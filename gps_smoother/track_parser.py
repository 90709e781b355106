import pandas as pd

from gps_smoother.fix import Fix

REQUIRED_COLUMNS = ["timestamp", "latitude", "longitude"]

# CSV column -> Fix field, picked up when present
OPTIONAL_COLUMNS = {
    "altitude": "altitude",
    "horizontal_accuracy": "horizontal_accuracy",
    "vertical_accuracy": "vertical_accuracy",
    "course": "course",
    "course_accuracy": "course_accuracy",
    "speed": "speed",
    "speed_accuracy": "speed_accuracy",
}


def read_data(file):
    df = pd.read_csv(file, skipinitialspace=True)
    df.columns = df.columns.str.strip()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{file}: missing column(s) {', '.join(missing)}; found {df.columns.tolist()}")
    return df


def read_track(file):
    """
    Load a recorded track as a list of Fix objects, in file order.

    Timestamps are POSIX seconds. Blank optional cells fall back to the
    Fix defaults.
    """
    df = read_data(file)
    present = {col: field for col, field in OPTIONAL_COLUMNS.items() if col in df.columns}

    fixes = []
    for row in df.to_dict("records"):
        extra = {field: float(row[col]) for col, field in present.items() if pd.notna(row[col])}
        fixes.append(Fix(
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            timestamp=float(row["timestamp"]),
            **extra,
        ))
    return fixes
