# dronesim/simulation/systems/battery.py

from typing import Tuple

from ..config import SimulationConfig
from ..data_models import DroneHealth

class BatterySystem:
    """Battery charge and health derived from ground distance only"""

    def __init__(self, config: SimulationConfig = None):
        self.config = config or SimulationConfig()

    def charge_pct(self, distance_traveled_m: float) -> float:
        """Remaining charge. Independent of speed and time, so idempotent per distance."""
        consumed = (distance_traveled_m / 1000.0) * self.config.consumption_pct_per_km
        return max(0.0, 100.0 - consumed)

    def health(self, battery_pct: float) -> DroneHealth:
        if battery_pct <= self.config.critical_threshold_pct:
            return DroneHealth.CRITICAL
        elif battery_pct <= self.config.warning_threshold_pct:
            return DroneHealth.WARNING
        return DroneHealth.NOMINAL

    def update(self, distance_traveled_m: float) -> Tuple[float, DroneHealth]:
        battery_pct = self.charge_pct(distance_traveled_m)
        return battery_pct, self.health(battery_pct)

    def range_remaining_m(self, distance_traveled_m: float) -> float:
        """Ground distance left before the pack is empty"""
        return self.charge_pct(distance_traveled_m) / self.config.consumption_pct_per_km * 1000.0
