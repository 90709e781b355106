import csv
from pathlib import Path

from gps_smoother.nav_utils import correction_distance

HEADER = ["timestamp", "status", "raw latitude", "raw longitude", "raw altitude",
          "latitude", "longitude", "altitude", "correction (m)", "horizontal accuracy", "speed", "course"]


class CSVLogger:
    def __init__(self, filename=None, logging=True, base_dir="CSV_files"):
        self.logging = logging
        self.filename = None
        if not self.logging:
            print("[CSVLogger] Logging is not enabled.")
            return
        base_dir = Path(base_dir)
        base_dir.mkdir(parents=True, exist_ok=True)

        if filename.endswith(".csv"):
            filename = filename[:-4]  # Remove .csv if present
        folder = base_dir / filename
        folder.mkdir(parents=True, exist_ok=True)

        # Find unique filename within the folder
        file_path = folder / f"{filename}.csv"
        count = 1
        while file_path.exists():
            file_path = folder / f"{filename}_run{count}.csv"
            count += 1

        self.filename = file_path
        self.file = open(self.filename, "w", newline='')
        self.writer = csv.writer(self.file)
        self.writer.writerow(HEADER)
        print(f"[CSVLogger] Logging to {self.filename}")

    def add_point(self, raw, corrected=None, status="ok"):
        """One row per fix. A rejected fix has no corrected position and carries the reason in status."""
        if not self.logging:
            return
        if corrected is None:
            filtered = ["NULL", "NULL", "NULL", "NULL"]
        else:
            filtered = [corrected.latitude, corrected.longitude, corrected.altitude,
                        round(correction_distance(raw, corrected), 4)]
        self.writer.writerow([raw.timestamp, status,
                              raw.latitude, raw.longitude, raw.altitude,
                              *filtered,
                              raw.horizontal_accuracy, raw.speed, raw.course])

    def close(self):
        if not self.logging:
            return
        self.file.close()
