# backend/setup_reporter/workers/__init__.py
"""
Worker classes for the setup reporter.

The report worker is imported from ``workers.report_worker``.
"""

from .base_worker import BaseWorker

__all__ = ["BaseWorker"]
