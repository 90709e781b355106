# nav_utils.py
import math

EARTH_RADIUS_M = 6371000


def haversine_distance(lat1, lon1, lat2, lon2):
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi/2)**2 + math.cos(phi1)*math.cos(phi2)*math.sin(dlambda/2)**2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c  # metres


def correction_distance(raw, corrected):
    """Horizontal distance in metres the filter moved a fix."""
    return haversine_distance(raw.latitude, raw.longitude, corrected.latitude, corrected.longitude)
