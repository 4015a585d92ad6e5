# examples/E001_headless_flight.py
"""
Flies the default route without the web display and prints telemetry once
per simulated second of wall-clock time.
"""
import sys
import os
import logging

# --- Path Correction ---
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from dronesim.constants import DroneConstants
from dronesim.simulation import SimulationEngine, DroneStatus
from helpers.map_helpers import format_eta

FRAME_MS = 50.0
TARGET_SPEED_KMH = 40.0
TIME_SCALE = 4.0
MAX_FRAMES = 100000

def main():
    engine = SimulationEngine(DroneConstants.DEFAULT_ROUTE['START'], DroneConstants.DEFAULT_ROUTE['END'])
    engine.set_speed(TARGET_SPEED_KMH)
    engine.set_time_scale(TIME_SCALE)
    engine.start()

    frames_per_report = int(1000 / FRAME_MS)
    for frame in range(MAX_FRAMES):
        state = engine.tick(FRAME_MS)
        if frame % frames_per_report == 0 or state.status is DroneStatus.ARRIVED:
            print(f"{state.status.value:>8} | {state.distance_traveled_m:8.1f}/{state.total_distance_m:.1f} m | "
                  f"{state.current_speed_kmh:6.1f} km/h | ETA {format_eta(state.eta_sec)} | "
                  f"BAT {state.battery_pct:5.1f}% {state.health.value}")
        if state.status is DroneStatus.ARRIVED:
            break

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    main()
