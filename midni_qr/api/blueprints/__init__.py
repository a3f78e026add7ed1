"""
Blueprints Package

Contains all Flask blueprints for REST API endpoints.
"""

from .decode_bp import create_decode_blueprint

__all__ = ["create_decode_blueprint"]
