# dronesim/exceptions.py

class DroneSimException(Exception):
    """Base exception for all simulation errors"""
    pass

class InvalidControlError(DroneSimException, ValueError):
    """Rejected control input (speed, time scale, endpoints)"""
    def __init__(self, message: str, control: str = None):
        """
        Args:
            control: Name of the offending control, e.g. "speed"
        """
        self.control = control
        super().__init__(message)

class InvalidPathError(InvalidControlError):
    """Endpoints outside valid latitude/longitude ranges"""
    def __init__(self, message: str):
        super().__init__(message, control="path")

class SimulationInvariantError(DroneSimException):
    """State left its valid domain. Always a programming defect."""
    pass
