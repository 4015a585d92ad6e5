# dronesim/simulation/kinematics.py
"""
1-D speed profile along the path.

The profile is the braking-distance formulation: speed approaches the
commanded cruise speed under a bounded acceleration, and is capped by the
speed from which the drone can still stop in the remaining distance,
v_stop = sqrt(2 * a * remaining). Both the cruise speed and the
acceleration are multiplied by the time scale, so distance is integrated
with plain wall-clock dt.
"""
import math

from ..constants import DroneConstants

KMH_PER_MPS = DroneConstants.SPEED['KMH_PER_MPS']

def commanded_speed_mps(target_speed_kmh: float, time_scale: float) -> float:
    return target_speed_kmh / KMH_PER_MPS * time_scale

def acceleration_limit(accel_mps2: float, time_scale: float) -> float:
    return accel_mps2 * time_scale

def stopping_speed_mps(accel: float, remaining_m: float) -> float:
    """Highest speed from which the drone stops within `remaining_m`."""
    return math.sqrt(max(0.0, 2.0 * accel * remaining_m))

def desired_speed_mps(running: bool, commanded_mps: float, accel: float, remaining_m: float) -> float:
    if not running:
        return 0.0
    return min(commanded_mps, stopping_speed_mps(accel, remaining_m))

def next_speed_mps(current_mps: float, desired_mps: float, accel: float, dt_sec: float) -> float:
    """Move `current_mps` toward `desired_mps` by at most accel * dt."""
    step = accel * dt_sec
    if desired_mps > current_mps:
        next_mps = min(desired_mps, current_mps + step)
    elif desired_mps < current_mps:
        next_mps = max(desired_mps, current_mps - step)
    else:
        next_mps = current_mps
    return max(0.0, next_mps)

def integrate_distance(distance_m: float, speed_mps: float, dt_sec: float, total_m: float) -> float:
    return max(0.0, min(total_m, distance_m + speed_mps * dt_sec))
