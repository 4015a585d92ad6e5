# dronesim/simulation/data_models.py

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

class DroneStatus(Enum):
    IDLE = "Idle"
    EN_ROUTE = "EnRoute"
    ARRIVED = "Arrived"

class DroneHealth(Enum):
    NOMINAL = "Nominal"
    WARNING = "Warning"
    CRITICAL = "Critical"

@dataclass(frozen=True)
class Controls:
    """
    Commands supplied by the display layer every tick. Values are assumed
    validated by the engine's control surface.
    """
    running: bool = False
    target_speed_kmh: float = 20.0
    time_scale: float = 1.0

@dataclass(frozen=True)
class SimulationState:
    """
    Immutable snapshot of the drone. The engine replaces the whole object
    every tick; readers never see a partial update.
    """
    position: Tuple[float, float]   # (lat, lon) in degrees
    total_distance_m: float         # Cached path length, always > 0
    distance_traveled_m: float = 0.0
    current_speed_mps: float = 0.0
    elapsed_run_sec: float = 0.0    # Simulated seconds while running
    status: DroneStatus = DroneStatus.IDLE
    battery_pct: float = 100.0
    health: DroneHealth = DroneHealth.NOMINAL
    eta_sec: Optional[float] = None # None until the first estimate
    altitude_m: float = 0.0         # AGL

    @property
    def progress(self) -> float:
        return max(0.0, min(1.0, self.distance_traveled_m / self.total_distance_m))

    @property
    def remaining_m(self) -> float:
        return max(0.0, self.total_distance_m - self.distance_traveled_m)

    @property
    def current_speed_kmh(self) -> float:
        return self.current_speed_mps * 3.6
