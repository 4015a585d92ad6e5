#!/usr/bin/env python3
# helpers/tests/test_sim_runner.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent
sys.path.append(str(project_root))

import unittest
from unittest.mock import MagicMock, patch
from dronesim.exceptions import InvalidControlError
from dronesim.simulation import DroneStatus
from helpers.sim_runner import (
    FrameClock, apply_command, create_sim_state, drain_commands, parse_command,
    run_frame, simulation_worker, stop_worker
)

START = (40.9916, 29.0247)
END = (40.9814, 29.0262)

class TestParseCommand(unittest.TestCase):
    def test_simple_actions(self):
        for action in ('start', 'pause', 'reset'):
            self.assertEqual(parse_command({'action': action}), {'action': action})

    def test_numeric_actions(self):
        self.assertEqual(parse_command({'action': 'speed', 'value': 35}), {'action': 'speed', 'value': 35.0})
        self.assertEqual(parse_command({'action': 'time_scale', 'value': 2.5})['value'], 2.5)

    def test_rejects_invalid_payloads(self):
        bad_payloads = [
            None,
            [],
            {'action': 'warp'},
            {'action': 'speed'},
            {'action': 'speed', 'value': -5},
            {'action': 'speed', 'value': "10"},
            {'action': 'time_scale', 'value': 0},
            {'action': 'path', 'start': [41.0, 29.0]},
            {'action': 'path', 'start': [41.0], 'end': [41.0, 29.0]},
            {'action': 'path', 'start': [100.0, 29.0], 'end': [41.0, 29.0]},
        ]
        for payload in bad_payloads:
            with self.assertRaises(InvalidControlError, msg=str(payload)):
                parse_command(payload)

    def test_path_command(self):
        command = parse_command({'action': 'path', 'start': [41.0, 29.0], 'end': [41.01, 29.01]})
        self.assertEqual(command['start'], (41.0, 29.0))
        self.assertEqual(command['end'], (41.01, 29.01))

class TestApplyCommand(unittest.TestCase):
    def test_dispatch(self):
        engine = MagicMock()
        apply_command(engine, {'action': 'start'})
        apply_command(engine, {'action': 'speed', 'value': 30.0})
        apply_command(engine, {'action': 'time_scale', 'value': 3.0})
        apply_command(engine, {'action': 'path', 'start': START, 'end': END})
        apply_command(engine, {'action': 'pause'})
        apply_command(engine, {'action': 'reset'})
        engine.start.assert_called_once_with()
        engine.set_speed.assert_called_once_with(30.0)
        engine.set_time_scale.assert_called_once_with(3.0)
        engine.set_path.assert_called_once_with(START, END)
        engine.pause.assert_called_once_with()
        engine.reset.assert_called_once_with()

    def test_unknown_action(self):
        with self.assertRaises(InvalidControlError):
            apply_command(MagicMock(), {'action': 'warp'})

class TestFrameLoop(unittest.TestCase):
    def setUp(self):
        self.state = create_sim_state(start=START, end=END)

    def test_commands_applied_in_order(self):
        self.state['command_queue'].put({'action': 'speed', 'value': 50.0})
        self.state['command_queue'].put({'action': 'start'})
        self.state['command_queue'].put({'action': 'pause'})
        self.assertEqual(drain_commands(self.state), 3)
        engine = self.state['engine']
        self.assertEqual(engine.controls.target_speed_kmh, 50.0)
        self.assertFalse(engine.controls.running)

    def test_rejected_command_is_logged_not_raised(self):
        self.state['command_queue'].put({'action': 'speed', 'value': -1.0})
        with self.assertLogs(level='WARNING'):
            self.assertEqual(drain_commands(self.state), 0)

    def test_run_frame_publishes_latest_payload(self):
        self.state['command_queue'].put({'action': 'start'})
        for _ in range(100):
            payload = run_frame(self.state, 100)
        self.assertEqual(self.state['telemetry_queue'].qsize(), 1)
        published = self.state['telemetry_queue'].get_nowait()
        self.assertEqual(published, payload)
        self.assertEqual(published['status'], DroneStatus.EN_ROUTE.value)
        self.assertTrue(published['running'])
        self.assertGreater(len(published['trail']), 2)

    def test_payload_reports_range_remaining(self):
        payload = run_frame(self.state, 100)
        self.assertAlmostEqual(payload['range_remaining_m'], 50000.0)
        self.state['command_queue'].put({'action': 'start'})
        for _ in range(100):
            payload = run_frame(self.state, 100)
        expected = payload['battery_pct'] / 2.0 * 1000.0
        self.assertAlmostEqual(payload['range_remaining_m'], expected, places=6)
        self.assertLess(payload['range_remaining_m'], 50000.0)

    def test_trail_restarts_after_reset(self):
        self.state['command_queue'].put({'action': 'start'})
        for _ in range(100):
            run_frame(self.state, 100)
        self.state['command_queue'].put({'action': 'reset'})
        self.state['command_queue'].put({'action': 'pause'})
        payload = run_frame(self.state, 100)
        self.assertEqual(payload['status'], 'Idle')
        self.assertEqual(payload['trail'], [list(START)])

class TestWorker(unittest.TestCase):
    def test_frame_clock(self):
        ticks = iter([10.0, 10.016, 10.050])
        clock = FrameClock(clock=lambda: next(ticks))
        self.assertEqual(clock.delta_ms(), 0.0)
        self.assertAlmostEqual(clock.delta_ms(), 16.0)
        self.assertAlmostEqual(clock.delta_ms(), 34.0)

    def test_stop_is_idempotent(self):
        state = create_sim_state(start=START, end=END)
        stop_worker(state)
        stop_worker(state)
        self.assertTrue(state['stop_event'].is_set())
        # Returns immediately once stopped
        simulation_worker(state)

    def test_worker_stops_on_frame_failure(self):
        state = create_sim_state(start=START, end=END)
        with patch('helpers.sim_runner.run_frame', side_effect=RuntimeError("boom")):
            with self.assertLogs(level='ERROR'):
                with self.assertRaises(RuntimeError):
                    simulation_worker(state, interval_s=0.0)
        self.assertTrue(state['stop_event'].is_set())

if __name__ == '__main__':
    unittest.main()
