# Kalman filter for smoothing GPS fixes (latitude, longitude, altitude)
import numpy as np

from gps_smoother.config import FilterConfig
from gps_smoother.errors import (
    DegenerateIntervalError,
    KalmanFilterError,
    NonInvertibleInnovationError,
)
from gps_smoother.fix import validate_fix

# State: [lat, lat_velocity, lon, lon_velocity, alt, alt_velocity]
STATE_SIZE = 6


def _condition(S):
    with np.errstate(all="ignore"):
        try:
            return float(np.linalg.cond(S))
        except np.linalg.LinAlgError:
            return float("inf")


def prediction_matrix(dt):
    """Constant velocity model: each position row picks up dt times its velocity."""
    A = np.eye(STATE_SIZE)
    for i in range(0, STATE_SIZE, 2):
        A[i, i + 1] = dt
    return A


def process_noise(dt, sigma):
    """
    Discretised constant-acceleration noise, one 2x2 block per axis:

        sigma * [[dt^4/4, dt^3/2],
                 [dt^3/2, dt^2  ]]
    """
    part1 = sigma * (dt ** 4 / 4.0)
    part2 = sigma * (dt ** 3 / 2.0)
    part3 = sigma * dt ** 2
    block = np.array([[part1, part2],
                      [part2, part3]])
    Q = np.zeros((STATE_SIZE, STATE_SIZE))
    for i in range(0, STATE_SIZE, 2):
        Q[i:i + 2, i:i + 2] = block
    return Q


def measurement_vector(previous, current, dt):
    """
    Measured position interleaved with the finite-difference velocity.
    Velocity is previous minus current, divided by dt.
    """
    return np.array([
        [current.latitude],
        [(previous.latitude - current.latitude) / dt],
        [current.longitude],
        [(previous.longitude - current.longitude) / dt],
        [current.altitude],
        [(previous.altitude - current.altitude) / dt],
    ])


class GeoKalmanFilter:
    """
    Linear Kalman filter over a 6-element position/velocity state.

    Built from the first fix, then fed one fix at a time through process(),
    which returns the corrected fix and advances the filter in place. A fix
    that raises (see gps_smoother.errors) leaves the filter unchanged.
    """

    def __init__(self, initial_fix, config=None):
        validate_fix(initial_fix)
        self.config = config or FilterConfig()

        self.x = np.array([[initial_fix.latitude], [0.0],
                           [initial_fix.longitude], [0.0],
                           [initial_fix.altitude], [0.0]], dtype=float)
        self.P = np.zeros((STATE_SIZE, STATE_SIZE))
        self.A = np.eye(STATE_SIZE)
        self.Q = np.zeros((STATE_SIZE, STATE_SIZE))
        self.R = np.eye(STATE_SIZE) * self.config.r_value
        self.z = np.zeros((STATE_SIZE, 1))

        self.previous_fix = initial_fix
        self.previous_timestamp = initial_fix.seconds

    def process(self, fix):
        validate_fix(fix)
        timestamp = fix.seconds
        dt = timestamp - self.previous_timestamp
        if dt <= 0:
            raise DegenerateIntervalError(dt)

        A = prediction_matrix(dt)
        Q = process_noise(dt, self.config.sigma)
        z = measurement_vector(self.previous_fix, fix, dt)

        # Prediction
        x_pred = A @ self.x
        P_pred = A @ self.P @ A.T + Q

        # Update
        S = P_pred + self.R
        try:
            K = P_pred @ np.linalg.inv(S)
        except np.linalg.LinAlgError:
            raise NonInvertibleInnovationError(_condition(S))
        x_post = x_pred + K @ (z - x_pred)
        P_post = (np.eye(STATE_SIZE) - K) @ P_pred
        if not (np.all(np.isfinite(x_post)) and np.all(np.isfinite(P_post))):
            raise NonInvertibleInnovationError(_condition(S))

        corrected = fix.with_position(x_post[0, 0], x_post[2, 0], x_post[4, 0])

        self.x = x_post
        self.P = P_post
        self.A = A
        self.Q = Q
        self.z = z
        self.previous_fix = fix
        self.previous_timestamp = timestamp
        return corrected

    @property
    def position(self):
        return float(self.x[0, 0]), float(self.x[2, 0]), float(self.x[4, 0])

    @property
    def state(self):
        return self.x.copy()

    @property
    def covariance(self):
        return self.P.copy()

    @property
    def prediction_matrix(self):
        return self.A.copy()

    @property
    def process_noise(self):
        return self.Q.copy()

    @property
    def measurement_noise(self):
        return self.R.copy()

    @property
    def measurement(self):
        return self.z.copy()


def smooth(fixes, config=None):
    """
    Run a filter over a sequence of fixes.

    Yields (raw, corrected, error) per fix. The first usable fix starts the
    filter and comes back unchanged; a rejected fix yields corrected=None and
    the error, and the filter carries on from its previous state.
    """
    kf = None
    for fix in fixes:
        if kf is None:
            try:
                kf = GeoKalmanFilter(fix, config)
            except KalmanFilterError as e:
                yield fix, None, e
                continue
            yield fix, fix, None
            continue
        try:
            yield fix, kf.process(fix), None
        except KalmanFilterError as e:
            yield fix, None, e
