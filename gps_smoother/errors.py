class KalmanFilterError(ValueError):
    """Base class for fixes the filter refuses to process."""


class DegenerateIntervalError(KalmanFilterError):
    """The fix is not strictly newer than the previous one (dt <= 0)."""

    def __init__(self, dt):
        self.dt = dt
        super().__init__(f"Time interval between fixes must be positive, got {dt} s")


class NonInvertibleInnovationError(KalmanFilterError):
    """Innovation covariance S = P + R is singular or too ill-conditioned to invert."""

    def __init__(self, condition_number):
        self.condition_number = condition_number
        super().__init__(f"Innovation covariance is not invertible (condition number {condition_number:.3g})")


class InvalidCoordinateError(KalmanFilterError):
    """Latitude, longitude, altitude or timestamp is not a usable number."""
