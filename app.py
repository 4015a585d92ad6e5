# app.py
import logging
import os
import queue

from flask import Flask, jsonify, request

from dronesim.exceptions import InvalidControlError
from dronesim.simulation import SimulationConfig
from helpers.map_helpers import build_route_map
from helpers.sim_runner import create_sim_state, parse_command, start_worker

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "sim_config.json")

def load_config() -> SimulationConfig:
    """DRONESIM_CONFIG overrides config/sim_config.json; defaults when neither exists."""
    config_path = os.environ.get("DRONESIM_CONFIG", DEFAULT_CONFIG_PATH)
    if os.path.exists(config_path):
        logging.info(f"Loading simulation config from {config_path}")
        return SimulationConfig.from_json(config_path)
    logging.info("No simulation config file found, using defaults.")
    return SimulationConfig()

def latest_telemetry(sim: dict) -> dict:
    """Newest payload published by the worker, or the last one served when none is pending."""
    try:
        sim['last_good_telemetry'] = sim['telemetry_queue'].get_nowait()
    except queue.Empty:
        # No new frame since the last poll
        pass
    return sim['last_good_telemetry']

def create_app(state: dict = None) -> Flask:
    app = Flask(__name__)
    app.config['SIM_STATE'] = state if state is not None else create_sim_state(load_config())

    @app.route('/')
    def index():
        try:
            # Route, drone and trail all come from one worker-published payload
            route_map = build_route_map(latest_telemetry(app.config['SIM_STATE']))
            return route_map.get_root().render()
        except Exception as e:
            logging.error(f"Failed to render route map: {e}", exc_info=True)
            return jsonify({'success': False, 'error': f'Map rendering failed: {e}'}), 500

    @app.route('/position')
    def position():
        return jsonify(latest_telemetry(app.config['SIM_STATE']))

    @app.route('/control', methods=['POST'])
    def control():
        sim = app.config['SIM_STATE']
        try:
            command = parse_command(request.get_json(silent=True))
            sim['command_queue'].put(command)
        except InvalidControlError as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        except Exception as e:
            logging.error(f"Control request failed: {e}", exc_info=True)
            return jsonify({'success': False, 'error': f'Control request failed: {e}'}), 500
        return jsonify({'success': True, 'queued': command['action']})

    @app.route('/debug/engine')
    def debug_engine():
        """Inspect engine configuration and controls."""
        sim = app.config['SIM_STATE']
        engine = sim['engine']
        return jsonify({
            'config': engine.config.to_dict(),
            'controls': {
                'running': engine.controls.running,
                'target_speed_kmh': engine.controls.target_speed_kmh,
                'time_scale': engine.controls.time_scale,
            },
            'run_id': engine.run_id,
            'status': engine.snapshot.status.value,
            'pending_commands': sim['command_queue'].qsize(),
            'worker_stopped': sim['stop_event'].is_set(),
        })

    return app

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    app = create_app()
    start_worker(app.config['SIM_STATE'])
    app.run(debug=True, use_reloader=False)
