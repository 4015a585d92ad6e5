# examples/E010_speed_profile.py
"""
Plots speed, distance and battery over a full run so the ramp-up, cruise
and braking phases of the speed profile can be inspected.
"""
import sys
import os
import logging

import numpy as np
import matplotlib.pyplot as plt

# --- Path Correction ---
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from dronesim.constants import DroneConstants
from dronesim.simulation import SimulationEngine, DroneStatus

FRAME_MS = 100.0
MAX_FRAMES = 50000

def record_run(speed_kmh: float, time_scale: float) -> dict:
    engine = SimulationEngine(DroneConstants.DEFAULT_ROUTE['START'], DroneConstants.DEFAULT_ROUTE['END'])
    engine.set_speed(speed_kmh)
    engine.set_time_scale(time_scale)
    engine.start()

    rows = []
    for frame in range(MAX_FRAMES):
        state = engine.tick(FRAME_MS)
        rows.append((frame * FRAME_MS / 1000.0, state.current_speed_kmh, state.distance_traveled_m, state.battery_pct))
        if state.status is DroneStatus.ARRIVED:
            break
    data = np.array(rows)
    return {'t': data[:, 0], 'speed': data[:, 1], 'distance': data[:, 2], 'battery': data[:, 3]}

def main():
    fig, (ax_speed, ax_dist, ax_bat) = plt.subplots(3, 1, sharex=True, figsize=(9, 8))
    for time_scale in (1.0, 2.0, 5.0):
        run = record_run(speed_kmh=30.0, time_scale=time_scale)
        label = f"x{time_scale:g}"
        ax_speed.plot(run['t'], run['speed'], label=label)
        ax_dist.plot(run['t'], run['distance'], label=label)
        ax_bat.plot(run['t'], run['battery'], label=label)
        logging.info(f"Time scale {label}: arrived after {run['t'][-1]:.1f} s wall clock")

    ax_speed.set_ylabel("Speed (km/h)")
    ax_dist.set_ylabel("Distance (m)")
    ax_bat.set_ylabel("Battery (%)")
    ax_bat.set_xlabel("Wall-clock time (s)")
    ax_speed.legend()
    for ax in (ax_speed, ax_dist, ax_bat):
        ax.grid(True, alpha=0.3)
    fig.suptitle("Speed profile: acceleration limit and braking-distance cap")
    fig.tight_layout()

    output = os.path.join(PROJECT_ROOT, "speed_profile.png")
    fig.savefig(output, dpi=120)
    logging.info(f"Speed profile saved to '{output}'")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    main()
