"""
Database access for the setup reporter.
"""

from .event_source import FETCH_RECENT_EVENTS_QUERY, SetupEventSource

__all__ = ["FETCH_RECENT_EVENTS_QUERY", "SetupEventSource"]
