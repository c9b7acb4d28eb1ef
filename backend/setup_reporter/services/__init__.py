# backend/setup_reporter/services/__init__.py
"""
Services package for the setup reporter.

Import submodules directly, e.g. ``services.report_pipeline``.
"""
