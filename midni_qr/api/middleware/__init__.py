"""
Middleware Package

Contains request monitoring middleware.
"""

from .monitoring import setup_monitoring

__all__ = ["setup_monitoring"]
