from gps_smoother.config import DEFAULT_R_VALUE, SIGMA, FilterConfig, load_config
from gps_smoother.errors import (
    DegenerateIntervalError,
    InvalidCoordinateError,
    KalmanFilterError,
    NonInvertibleInnovationError,
)
from gps_smoother.filters.kalman_filter import GeoKalmanFilter, smooth
from gps_smoother.fix import Fix

__version__ = "0.1.0"
