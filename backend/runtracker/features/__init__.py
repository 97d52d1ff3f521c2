"""
Feature modules.

- tracking: Real-time activity tracking engine
"""
