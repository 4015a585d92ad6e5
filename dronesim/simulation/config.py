# dronesim/simulation/config.py

import json
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Union

from ..constants import DroneConstants

@dataclass(frozen=True)
class SimulationConfig:
    """Tunable parameters of the simulation engine. Defaults come from DroneConstants."""

    accel_mps2: float = DroneConstants.SPEED['ACCEL_MPS2']
    arrival_tolerance_m: float = DroneConstants.FLIGHT['ARRIVAL_TOLERANCE_M']
    arrival_progress: float = DroneConstants.FLIGHT['ARRIVAL_PROGRESS']
    cruise_altitude_m: float = DroneConstants.FLIGHT['CRUISE_ALTITUDE_M']
    max_frame_dt_ms: float = DroneConstants.SIM['MAX_FRAME_DT_MS']
    min_path_length_m: float = DroneConstants.SIM['MIN_PATH_LENGTH_M']
    consumption_pct_per_km: float = DroneConstants.BATTERY['CONSUMPTION_PCT_PER_KM']
    warning_threshold_pct: float = DroneConstants.BATTERY['WARNING_THRESHOLD_PCT']
    critical_threshold_pct: float = DroneConstants.BATTERY['CRITICAL_THRESHOLD_PCT']
    default_speed_kmh: float = DroneConstants.SPEED['DEFAULT_KMH']
    max_speed_kmh: float = DroneConstants.SPEED['MAX_KMH']
    default_time_scale: float = DroneConstants.SIM['DEFAULT_TIME_SCALE']

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"SimulationConfig.{f.name} must be a positive number, got {value!r}")
        if self.critical_threshold_pct > self.warning_threshold_pct:
            raise ValueError("critical_threshold_pct must not exceed warning_threshold_pct")
        if self.arrival_progress > 1:
            raise ValueError("arrival_progress must be within (0, 1]")

    @property
    def max_frame_dt_sec(self) -> float:
        return self.max_frame_dt_ms / 1000.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown simulation config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "SimulationConfig":
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
