"""LibreHardwareMonitor JSON to OSC avatar parameter bridge"""

__version__ = "0.1.0"
