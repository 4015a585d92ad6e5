# dronesim/__init__.py
"""
dronesim - single-drone route simulation.

The engine lives in dronesim.simulation, the great-circle helpers in
dronesim.geodesy. Import from the subpackages directly:
- from dronesim.simulation import SimulationEngine
- from dronesim.geodesy import GeodesicPath
"""

__version__ = "0.3.0"
