"""
REST API Package for MiDNI QR

Exposes the payload decoder over HTTP for verifier front-ends that cannot
embed the library directly.

Author: MiDNI QR Project
Date: October 2026
"""

from .flask_app_factory import create_app

__all__ = ["create_app"]
