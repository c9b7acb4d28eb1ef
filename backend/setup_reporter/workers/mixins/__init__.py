"""
Worker mixins and shared worker helpers.
"""

from .retry_manager import RetryManager, retry

__all__ = ["RetryManager", "retry"]
