import math
import os
from dataclasses import dataclass

# Acceleration variance magnitude used in the process noise matrix (Q).
# 0.0625 works well for consumer GPS receivers.
SIGMA = 0.0625

# Sensor noise value for the measurement noise matrix (R).
# Higher values give smoother (rounder) trajectories, lower values follow the raw fixes closer.
DEFAULT_R_VALUE = 29.0

DEFAULT_BAUDRATE = 9600


@dataclass(frozen=True)
class FilterConfig:
    r_value: float = DEFAULT_R_VALUE
    sigma: float = SIGMA

    def __post_init__(self):
        for name in ("r_value", "sigma"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite, non-negative number, got {value!r}")
        # R = r * I must stay positive definite so S = P + R is always invertible
        if self.r_value <= 0:
            raise ValueError(f"r_value must be positive, got {self.r_value!r}")


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name}={raw!r} is not a number")


def load_config(r_value=None, sigma=None):
    """
    Build a FilterConfig. Explicit arguments win over the environment
    (GPS_KF_R_VALUE / GPS_KF_SIGMA), which win over the module defaults.
    """
    if r_value is None:
        r_value = _env_float("GPS_KF_R_VALUE", DEFAULT_R_VALUE)
    if sigma is None:
        sigma = _env_float("GPS_KF_SIGMA", SIGMA)
    return FilterConfig(r_value=float(r_value), sigma=float(sigma))


def serial_port():
    return os.getenv("RTK_PORT")


def serial_baudrate():
    return int(_env_float("RTK_BAUDRATE", DEFAULT_BAUDRATE))
