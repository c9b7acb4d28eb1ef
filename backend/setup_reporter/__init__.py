# backend/setup_reporter/__init__.py
"""
Setup Reporter - daily e-mail report of machine setups that ran over their limit.
"""

__version__ = "1.0.0"
