import threading
from xml.sax.saxutils import escape


class KMLLogger:
    def __init__(self, filename="track.kml", name="Filtered Track"):
        self.filename = filename
        self.points = []
        self.lock = threading.Lock()
        self.closed = False
        # Write KML header
        with open(self.filename, "w") as f:
            f.write(f"""<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
<Document>
<name>{escape(name)}</name>
<Placemark>
<LineString>
<altitudeMode>absolute</altitudeMode>
<coordinates>
""")
        print(f"[KMLLogger] Logging to {self.filename}")

    def add_point(self, lon, lat, alt=0.0):
        with self.lock:
            self.points.append((lon, lat, alt))
            with open(self.filename, "a") as f:
                f.write(f"{lon},{lat},{alt}\n")

    def add_fix(self, fix):
        self.add_point(fix.longitude, fix.latitude, fix.altitude)

    def close(self):
        with self.lock:
            if self.closed:
                return
            self.closed = True
            with open(self.filename, "a") as f:
                f.write("""</coordinates>
</LineString>
</Placemark>
</Document>
</kml>
""")
