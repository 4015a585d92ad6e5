#!/usr/bin/env python3
# helpers/tests/test_app_routes.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent
sys.path.append(str(project_root))

import unittest
from unittest.mock import patch
from app import create_app
from helpers.sim_runner import create_sim_state, run_frame

class TestAppRoutes(unittest.TestCase):
    def setUp(self):
        self.sim = create_sim_state()
        self.app = create_app(self.sim)
        self.client = self.app.test_client()

    def test_position_before_first_frame(self):
        response = self.client.get('/position')
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['status'], 'Idle')
        self.assertEqual(data['battery_pct'], 100.0)
        self.assertIsNone(data['eta_sec'])
        self.assertEqual(data['eta_display'], '--:--')

    def test_control_queues_command(self):
        response = self.client.post('/control', json={'action': 'start'})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['success'])
        self.assertEqual(self.sim['command_queue'].qsize(), 1)

    def test_control_rejects_bad_input(self):
        for payload in ({'action': 'speed', 'value': -10}, {'action': 'fly'}, {'action': 'time_scale', 'value': 0}):
            response = self.client.post('/control', json=payload)
            self.assertEqual(response.status_code, 400)
            self.assertFalse(response.get_json()['success'])
        response = self.client.post('/control', data="not json", content_type='text/plain')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.sim['command_queue'].qsize(), 0)

    def test_position_reflects_frames(self):
        self.client.post('/control', json={'action': 'speed', 'value': 40})
        self.client.post('/control', json={'action': 'start'})
        for _ in range(50):
            run_frame(self.sim, 100)
        data = self.client.get('/position').get_json()
        self.assertEqual(data['status'], 'EnRoute')
        self.assertEqual(data['target_speed_kmh'], 40.0)
        self.assertGreater(data['distance_traveled_m'], 0.0)
        # Without a new frame the last payload is served again
        self.assertEqual(self.client.get('/position').get_json(), data)

    def test_index_renders_map(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'leaflet', response.data.lower())

    def test_index_polls_position_and_posts_controls(self):
        html = self.client.get('/').get_data(as_text=True)
        self.assertIn("fetch('/position')", html)
        self.assertIn("fetch('/control'", html)
        self.assertIn("setInterval(", html)
        self.assertIn("simControl('start')", html)

    def test_index_uses_published_frame(self):
        """A path change is only drawn once the worker has published a frame for it"""
        self.sim['engine'].set_path((41.0, 29.0), (41.01, 29.01))
        html = self.client.get('/').get_data(as_text=True)
        self.assertIn("40.9814, 29.0262", html)
        self.assertNotIn("41.01, 29.01", html)

        run_frame(self.sim, 16)
        html = self.client.get('/').get_data(as_text=True)
        self.assertIn("41.01, 29.01", html)
        self.assertNotIn("40.9814, 29.0262", html)

    def test_control_unexpected_error_returns_json_500(self):
        with patch('app.parse_command', side_effect=RuntimeError("queue gone")):
            with self.assertLogs(level='ERROR') as logs:
                response = self.client.post('/control', json={'action': 'start'})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {'success': False, 'error': 'Control request failed: queue gone'})
        self.assertIn('queue gone', logs.output[0])
        self.assertEqual(self.sim['command_queue'].qsize(), 0)

    def test_index_unexpected_error_returns_json_500(self):
        with patch('app.build_route_map', side_effect=KeyError('start')):
            with self.assertLogs(level='ERROR'):
                response = self.client.get('/')
        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.get_json()['success'])

    def test_debug_engine(self):
        data = self.client.get('/debug/engine').get_json()
        self.assertEqual(data['status'], 'Idle')
        self.assertEqual(data['config']['max_frame_dt_ms'], 200.0)
        self.assertFalse(data['controls']['running'])

if __name__ == '__main__':
    unittest.main()
