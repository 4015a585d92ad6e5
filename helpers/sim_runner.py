# helpers/sim_runner.py
"""
Frame loop for the web display. The worker thread is the only caller of the
engine; HTTP handlers push commands into `command_queue` and read the latest
published payload from `telemetry_queue`.
"""
import logging
import math
import queue
import threading
import time
from typing import Any, Dict, Optional

from dronesim.constants import DroneConstants
from dronesim.exceptions import InvalidControlError
from dronesim.geodesy import GeodesicPath, LatLng
from dronesim.simulation import BatterySystem, SimulationConfig, SimulationEngine
from helpers.map_helpers import TrailRecorder, state_to_json

ACTIONS = ('start', 'pause', 'reset', 'speed', 'time_scale', 'path')

class FrameClock:
    """Wall-clock delta between frames. The first frame has a delta of zero."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._last: Optional[float] = None

    def delta_ms(self) -> float:
        now = self._clock()
        if self._last is None:
            self._last = now
        dt_ms = (now - self._last) * 1000.0
        self._last = now
        return dt_ms

def create_sim_state(config: Optional[SimulationConfig] = None,
                     start: LatLng = DroneConstants.DEFAULT_ROUTE['START'],
                     end: LatLng = DroneConstants.DEFAULT_ROUTE['END']) -> Dict[str, Any]:
    engine = SimulationEngine(start, end, config=config)
    return {
        'engine': engine,
        'trail': TrailRecorder(),
        'command_queue': queue.Queue(),
        'telemetry_queue': queue.Queue(maxsize=1),
        'last_good_telemetry': build_payload(engine, []),
        'stop_event': threading.Event(),
    }

def build_payload(engine: SimulationEngine, trail) -> Dict[str, Any]:
    payload = state_to_json(engine.snapshot)
    payload.update({
        'run_id': engine.run_id,
        'running': engine.controls.running,
        'target_speed_kmh': engine.controls.target_speed_kmh,
        'time_scale': engine.controls.time_scale,
        'start': list(engine.path.start),
        'end': list(engine.path.end),
        'range_remaining_m': BatterySystem(engine.config).range_remaining_m(engine.snapshot.distance_traveled_m),
        'trail': [list(p) for p in trail],
    })
    return payload

def _require_number(command: Dict[str, Any], name: str) -> float:
    value = command.get('value')
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidControlError(f"'{name}' requires a finite numeric 'value'", control=name)
    return float(value)

def parse_command(payload: Any) -> Dict[str, Any]:
    """Validate an HTTP control payload before it reaches the frame loop."""
    if not isinstance(payload, dict):
        raise InvalidControlError("Control payload must be a JSON object")
    action = payload.get('action')
    if action not in ACTIONS:
        raise InvalidControlError(f"Unknown action {action!r}. Expected one of {', '.join(ACTIONS)}")

    if action == 'speed':
        value = _require_number(payload, action)
        if value < 0:
            raise InvalidControlError(f"Speed must not be negative, got {value}", control=action)
        return {'action': action, 'value': value}
    if action == 'time_scale':
        value = _require_number(payload, action)
        if value <= 0:
            raise InvalidControlError(f"Time scale must be positive, got {value}", control=action)
        return {'action': action, 'value': value}
    if action == 'path':
        try:
            path = GeodesicPath(tuple(payload['start']), tuple(payload['end']))
        except (KeyError, TypeError, IndexError) as e:
            raise InvalidControlError(f"'path' requires 'start' and 'end' as [lat, lon]: {e}", control=action) from e
        return {'action': action, 'start': path.start, 'end': path.end}
    return {'action': action}

def apply_command(engine: SimulationEngine, command: Dict[str, Any]):
    action = command['action']
    if action == 'start':
        engine.start()
    elif action == 'pause':
        engine.pause()
    elif action == 'reset':
        engine.reset()
    elif action == 'speed':
        engine.set_speed(command['value'])
    elif action == 'time_scale':
        engine.set_time_scale(command['value'])
    elif action == 'path':
        engine.set_path(command['start'], command['end'])
    else:
        raise InvalidControlError(f"Unknown action {action!r}")

def drain_commands(state: Dict[str, Any]) -> int:
    """Apply every queued command in arrival order. Returns how many were applied."""
    applied = 0
    while True:
        try:
            command = state['command_queue'].get_nowait()
        except queue.Empty:
            return applied
        try:
            apply_command(state['engine'], command)
            applied += 1
        except InvalidControlError as e:
            logging.warning(f"Rejected control command {command}: {e}")

def run_frame(state: Dict[str, Any], dt_ms: float) -> Dict[str, Any]:
    """One frame: apply commands, step the engine, sample the trail, publish."""
    drain_commands(state)
    engine: SimulationEngine = state['engine']
    snapshot = engine.tick(dt_ms)
    trail: TrailRecorder = state['trail']
    trail.record(snapshot.position, run_id=engine.run_id)

    payload = build_payload(engine, trail.points)
    telemetry_queue: queue.Queue = state['telemetry_queue']
    try:
        telemetry_queue.get_nowait()
    except queue.Empty:
        pass
    telemetry_queue.put_nowait(payload)
    return payload

def simulation_worker(state: Dict[str, Any], interval_s: float = DroneConstants.SIM['FRAME_INTERVAL_S']):
    clock = FrameClock()
    stop_event: threading.Event = state['stop_event']
    logging.info("Simulation worker started.")
    while not stop_event.is_set():
        try:
            run_frame(state, clock.delta_ms())
        except Exception as e:
            logging.error(f"Simulation frame failed: {e}", exc_info=True)
            stop_event.set()
            raise
        stop_event.wait(interval_s)
    logging.info("Simulation worker stopped.")

def start_worker(state: Dict[str, Any]) -> threading.Thread:
    worker = threading.Thread(target=simulation_worker, args=(state,), daemon=True, name="simulation-worker")
    worker.start()
    return worker

def stop_worker(state: Dict[str, Any]):
    """Idempotent; the worker exits after its current frame."""
    state['stop_event'].set()
