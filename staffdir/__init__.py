"""
Staff directory: employee record stores with realtime synchronization.
"""

__version__ = "1.0.0"
