from .battery import BatterySystem

__all__ = ['BatterySystem']
