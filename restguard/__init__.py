"""
restguard - admissibility checks for worker rest and work intervals.
"""

__version__ = "0.1.0"
