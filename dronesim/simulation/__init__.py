# dronesim/simulation/__init__.py
"""
Public API of the simulation engine.

    engine = SimulationEngine(start=(40.99, 29.02), end=(40.98, 29.03))
    engine.start()
    state = engine.tick(16.7)
"""
from .core import SimulationEngine, step, initial_state
from .config import SimulationConfig
from .data_models import Controls, DroneHealth, DroneStatus, SimulationState
from .systems.battery import BatterySystem

__all__ = [
    'SimulationEngine',
    'step',
    'initial_state',
    'SimulationConfig',
    'Controls',
    'DroneHealth',
    'DroneStatus',
    'SimulationState',
    'BatterySystem'
]
