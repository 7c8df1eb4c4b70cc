"""
Config package: load tracker and ticket query configuration from YAML.
"""

from .loader import load_project, load_trackers, load_tickets, resolve_api_key, tracker_for

__all__ = ["load_project", "load_trackers", "load_tickets", "resolve_api_key", "tracker_for"]
