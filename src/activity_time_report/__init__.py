"""
Per-person activity time reports from the volunteer activity database.
"""

import importlib.metadata

__version__ = importlib.metadata.version("activity-time-report")
