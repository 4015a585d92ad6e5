# dronesim/simulation/core.py
"""
Simulation engine for a single drone flying a two-point great-circle path.

`step` is a pure reducer (previous state, controls, path, dt) -> next state
and holds all of the per-frame logic. `SimulationEngine` wraps it with the
control surface used by the display layer and owns the only mutable
reference to the current state.
"""
import logging
import math
from dataclasses import replace
from typing import Optional

from .config import SimulationConfig
from .data_models import Controls, DroneStatus, SimulationState
from .kinematics import (
    acceleration_limit, commanded_speed_mps, desired_speed_mps, integrate_distance, next_speed_mps
)
from .systems.battery import BatterySystem
from ..exceptions import InvalidControlError, SimulationInvariantError
from ..geodesy.path import GeodesicPath, LatLng

logger = logging.getLogger(__name__)

def path_total_m(path: GeodesicPath, config: SimulationConfig) -> float:
    """Path length clamped away from zero so progress and ETA never divide by zero."""
    return max(config.min_path_length_m, path.length_m)

def initial_state(path: GeodesicPath, config: SimulationConfig, running: bool = False) -> SimulationState:
    """Zeroed snapshot at the start of the path."""
    return SimulationState(
        position=path.start,
        total_distance_m=path_total_m(path, config),
        status=DroneStatus.EN_ROUTE if running else DroneStatus.IDLE,
        altitude_m=config.cruise_altitude_m if running else 0.0,
    )

def clamp_dt(dt_sec: float, config: SimulationConfig) -> float:
    if not math.isfinite(dt_sec) or dt_sec <= 0:
        return 0.0
    return min(dt_sec, config.max_frame_dt_sec)

def _check_invariants(state: SimulationState) -> None:
    if not 0.0 <= state.distance_traveled_m <= state.total_distance_m:
        raise SimulationInvariantError(
            f"distance {state.distance_traveled_m} outside [0, {state.total_distance_m}]"
        )
    if state.current_speed_mps < 0 or not math.isfinite(state.current_speed_mps):
        raise SimulationInvariantError(f"invalid speed {state.current_speed_mps}")
    if not 0.0 <= state.battery_pct <= 100.0:
        raise SimulationInvariantError(f"battery {state.battery_pct} outside [0, 100]")

def _has_arrived(distance_m: float, total_m: float, config: SimulationConfig) -> bool:
    remaining = total_m - distance_m
    return remaining <= config.arrival_tolerance_m or distance_m / total_m >= config.arrival_progress

def step(previous: SimulationState, controls: Controls, path: GeodesicPath,
         dt_sec: float, config: SimulationConfig) -> SimulationState:
    """
    Advance the simulation by one frame.

    Args:
        previous: State emitted by the previous tick.
        controls: Validated control inputs for this tick.
        path: The path `previous` was created for.
        dt_sec: Wall-clock seconds since the previous tick, capped at
            config.max_frame_dt_ms.

    Returns:
        SimulationState: The next immutable snapshot.
    """
    if previous.status is DroneStatus.ARRIVED:
        return previous

    dt = clamp_dt(dt_sec, config)
    total = previous.total_distance_m

    # Status first: the guard against flipping back to Idle uses the distance
    # accumulated before this tick.
    status = previous.status
    if controls.running:
        status = DroneStatus.EN_ROUTE
    elif previous.distance_traveled_m == 0.0 and previous.current_speed_mps == 0.0:
        status = DroneStatus.IDLE

    accel = acceleration_limit(config.accel_mps2, controls.time_scale)
    if status is DroneStatus.IDLE:
        speed = 0.0
        distance = previous.distance_traveled_m
    else:
        desired = desired_speed_mps(
            controls.running,
            commanded_speed_mps(controls.target_speed_kmh, controls.time_scale),
            accel,
            previous.remaining_m,
        )
        speed = next_speed_mps(previous.current_speed_mps, desired, accel, dt)
        distance = integrate_distance(previous.distance_traveled_m, speed, dt, total)

    elapsed = previous.elapsed_run_sec
    if controls.running:
        elapsed += dt * controls.time_scale

    if status is DroneStatus.EN_ROUTE and _has_arrived(distance, total, config):
        distance = total
        speed = 0.0
        status = DroneStatus.ARRIVED
        eta: Optional[float] = 0.0
        altitude = 0.0
    else:
        remaining = total - distance
        if controls.running and speed > 0:
            eta = remaining / speed
        else:
            eta = previous.eta_sec
        if status is DroneStatus.IDLE:
            altitude = 0.0
        elif controls.running:
            altitude = config.cruise_altitude_m
        else:
            altitude = previous.altitude_m

    battery_pct, health = BatterySystem(config).update(distance)
    state = SimulationState(
        position=path.point_at_distance(distance),
        total_distance_m=total,
        distance_traveled_m=distance,
        current_speed_mps=speed,
        elapsed_run_sec=elapsed,
        status=status,
        battery_pct=battery_pct,
        health=health,
        eta_sec=eta,
        altitude_m=altitude,
    )
    _check_invariants(state)
    return state


class SimulationEngine:
    """
    Owns the current SimulationState and the controls applied to it.

    The engine is synchronous and owns no timers: the caller decides when
    to tick and passes the elapsed wall-clock time.
    """

    def __init__(self, start: LatLng, end: LatLng, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self._path = GeodesicPath(start, end)
        self._controls = Controls(
            running=False,
            target_speed_kmh=self.config.default_speed_kmh,
            time_scale=self.config.default_time_scale,
        )
        self._state = initial_state(self._path, self.config)
        self._run_id = 1
        logger.info(
            f"SimulationEngine initialized. Path {self._path.start} -> {self._path.end}, "
            f"{self._state.total_distance_m:.1f} m"
        )

    # --- Read surface ---

    @property
    def snapshot(self) -> SimulationState:
        return self._state

    @property
    def controls(self) -> Controls:
        return self._controls

    @property
    def path(self) -> GeodesicPath:
        return self._path

    @property
    def run_id(self) -> int:
        """Incremented whenever a fresh run starts (reset or path change)."""
        return self._run_id

    # --- Control surface ---

    def start(self):
        if not self._controls.running:
            logger.info("Simulation started.")
        self._controls = replace(self._controls, running=True)

    def pause(self):
        if self._controls.running:
            logger.info(f"Simulation paused at {self._state.distance_traveled_m:.1f} m.")
        self._controls = replace(self._controls, running=False)

    def set_speed(self, kmh: float):
        if not _is_number(kmh) or not math.isfinite(kmh):
            raise InvalidControlError(f"Speed must be a finite number, got {kmh!r}", control="speed")
        if kmh < 0:
            raise InvalidControlError(f"Speed must not be negative, got {kmh}", control="speed")
        if kmh > self.config.max_speed_kmh:
            logger.warning(f"Speed {kmh} km/h above limit, clamped to {self.config.max_speed_kmh} km/h.")
            kmh = self.config.max_speed_kmh
        self._controls = replace(self._controls, target_speed_kmh=float(kmh))

    def set_time_scale(self, factor: float):
        if not _is_number(factor) or not math.isfinite(factor):
            raise InvalidControlError(f"Time scale must be a finite number, got {factor!r}", control="time_scale")
        if factor <= 0:
            raise InvalidControlError(f"Time scale must be positive, got {factor}", control="time_scale")
        if factor < 1:
            logger.warning(f"Time scale {factor} below 1, clamped to 1.")
            factor = 1.0
        self._controls = replace(self._controls, time_scale=float(factor))

    def reset(self) -> SimulationState:
        """Back to a zeroed Idle snapshot, whatever the running control says."""
        self._state = initial_state(self._path, self.config)
        self._run_id += 1
        logger.info("Simulation reset.")
        return self._state

    def set_path(self, start: LatLng, end: LatLng) -> SimulationState:
        """
        Replace the endpoints. A change starts a fresh run seeded from the
        running control; identical endpoints keep the current run.
        """
        path = GeodesicPath(start, end)
        if path == self._path:
            return self._state
        self._path = path
        self._state = initial_state(path, self.config, running=self._controls.running)
        self._run_id += 1
        logger.info(f"Path changed to {path.start} -> {path.end}, {self._state.total_distance_m:.1f} m.")
        return self._state

    def tick(self, dt_ms: float) -> SimulationState:
        """Advance by `dt_ms` wall-clock milliseconds and return the new snapshot."""
        if dt_ms > self.config.max_frame_dt_ms:
            logger.debug(f"Frame gap {dt_ms:.0f} ms clamped to {self.config.max_frame_dt_ms:.0f} ms.")
        previous = self._state
        self._state = step(previous, self._controls, self._path, dt_ms / 1000.0, self.config)
        if previous.status is not DroneStatus.ARRIVED and self._state.status is DroneStatus.ARRIVED:
            logger.info(
                f"Arrived after {self._state.elapsed_run_sec:.1f} s simulated, "
                f"battery {self._state.battery_pct:.1f}%."
            )
        return self._state


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
