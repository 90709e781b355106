from gps_smoother.filters.kalman_filter import (
    GeoKalmanFilter,
    measurement_vector,
    prediction_matrix,
    process_noise,
    smooth,
)
