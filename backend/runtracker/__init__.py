"""
Run Tracker backend.

Real-time activity tracking engine for a running companion app.
"""

__version__ = "0.1.0"
