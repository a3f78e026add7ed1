"""
MiDNI QR Configuration Package

Centralizes constants and parser settings.
"""

from .qr_config import (
    QR_CONSTANTS,
    DEFAULT_PARSER_CONFIG,
    QRConstants,
    QRParserConfig,
)

__all__ = [
    'QR_CONSTANTS',
    'DEFAULT_PARSER_CONFIG',
    'QRConstants',
    'QRParserConfig',
]
