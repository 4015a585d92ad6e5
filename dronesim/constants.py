# dronesim/constants.py

class DroneConstants:
    """Operating limits and model parameters for the simulated delivery drone"""

    # ===== SPEED =====
    SPEED = {
        'DEFAULT_KMH': 20.0,
        'MAX_KMH': 120.0,
        'ACCEL_MPS2': 2.5,          # Scaled by the time scale
        'KMH_PER_MPS': 3.6
    }

    # ===== BATTERY =====
    BATTERY = {
        'FULL_PCT': 100.0,
        'CONSUMPTION_PCT_PER_KM': 2.0,   # Ground distance only
        'WARNING_THRESHOLD_PCT': 25.0,
        'CRITICAL_THRESHOLD_PCT': 15.0
    }

    # ===== FLIGHT =====
    FLIGHT = {
        'CRUISE_ALTITUDE_M': 60.0,       # AGL while en route
        'ARRIVAL_TOLERANCE_M': 0.5,
        'ARRIVAL_PROGRESS': 0.999
    }

    # ===== SIMULATION =====
    SIM = {
        'MAX_FRAME_DT_MS': 200.0,
        'FRAME_INTERVAL_S': 1 / 60,
        'MIN_PATH_LENGTH_M': 1e-6,
        'DEFAULT_TIME_SCALE': 1.0
    }

    # ===== DISPLAY =====
    TRAIL_MIN_DISPLACEMENT_M = 5.0
    DISPLAY = {
        'POLL_INTERVAL_MS': 250,
        'TIME_SCALE_PRESETS': (1, 2, 5, 20),
        'SPEED_PRESETS_KMH': (10, 20, 40, 60)
    }

    # Istanbul, Kadikoy pier to Moda
    DEFAULT_ROUTE = {
        'START': (40.9916, 29.0247),
        'END': (40.9814, 29.0262)
    }
