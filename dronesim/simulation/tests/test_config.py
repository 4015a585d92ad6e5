#!/usr/bin/env python3
# dronesim/simulation/tests/test_config.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import json
import tempfile
import unittest
from dronesim.constants import DroneConstants
from dronesim.simulation.config import SimulationConfig

class TestSimulationConfig(unittest.TestCase):
    def test_defaults_come_from_constants(self):
        config = SimulationConfig()
        self.assertEqual(config.accel_mps2, DroneConstants.SPEED['ACCEL_MPS2'])
        self.assertEqual(config.max_frame_dt_ms, 200.0)
        self.assertAlmostEqual(config.max_frame_dt_sec, 0.2)
        self.assertEqual(config.cruise_altitude_m, 60.0)

    def test_rejects_non_positive_values(self):
        with self.assertRaises(ValueError):
            SimulationConfig(accel_mps2=0.0)
        with self.assertRaises(ValueError):
            SimulationConfig(max_frame_dt_ms=-1.0)

    def test_rejects_booleans(self):
        """JSON true would otherwise load as 1.0"""
        with self.assertRaises(ValueError):
            SimulationConfig(accel_mps2=True)
        with self.assertRaises(ValueError):
            SimulationConfig.from_dict({'accel_mps2': True})

    def test_rejects_inverted_thresholds(self):
        with self.assertRaises(ValueError):
            SimulationConfig(critical_threshold_pct=30.0, warning_threshold_pct=25.0)

    def test_from_dict_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            SimulationConfig.from_dict({'warp_factor': 9})

    def test_from_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "sim_config.json"
            path.write_text(json.dumps({'accel_mps2': 4.0, 'max_frame_dt_ms': 1000}), encoding='utf-8')
            config = SimulationConfig.from_json(path)
        self.assertEqual(config.accel_mps2, 4.0)
        self.assertEqual(config.max_frame_dt_ms, 1000)
        self.assertEqual(config.to_dict()['arrival_tolerance_m'], 0.5)

if __name__ == '__main__':
    unittest.main()
