"""Client and view-state for the user directory API"""

__version__ = "1.0.0"
