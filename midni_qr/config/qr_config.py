"""
MiDNI QR Configuration - Centralized constants and parser settings

Operational defaults live in QR_CONSTANTS; per-parser behaviour lives in
QRParserConfig, which can be built from environment variables.

Usage:
    from midni_qr.config import QRParserConfig

    config = QRParserConfig.from_env()
    parser = DniQrParser(config=config)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class QRConstants:
    """
    Centralized constants for the decoder and its outer surfaces.

    Attributes:
        LOGGER_NAME: Root logger name for all components
        PHOTO_FORMAT: Pillow format used for the displayable photo
        PHOTO_MIME_TYPE: MIME type matching PHOTO_FORMAT
        PHOTO_SUFFIX: File suffix for display-handle backing files
        MAX_PAYLOAD_BYTES: Largest payload accepted by the HTTP API
        METRICS_MAX_SAMPLES: Bound on retained metrics samples
        TRUST_ANCHORS_PACKAGE: Package holding the bundled issuer certificates
    """
    LOGGER_NAME: str = "midni_qr"

    # Photo
    PHOTO_FORMAT: str = "PNG"
    PHOTO_MIME_TYPE: str = "image/png"
    PHOTO_SUFFIX: str = ".png"

    # API
    MAX_PAYLOAD_BYTES: int = 64 * 1024  # 64KB, un QR non supera ~3KB

    # Metrics
    METRICS_MAX_SAMPLES: int = 10000

    # Trust anchors
    TRUST_ANCHORS_PACKAGE: str = "midni_qr.data.trust_anchors"


# Istanza singleton globale
QR_CONSTANTS = QRConstants()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    return Path(raw) if raw else None


@dataclass(frozen=True)
class QRParserConfig:
    """
    Parser behaviour settings.

    Attributes:
        require_photo: Fail with ImageDecodeError when field 0x50 is absent
        concurrent_pipeline: Decode the photo and verify the signature in
            parallel worker threads
        photo_temp_dir: Directory for display-handle backing files
            (None = system temporary directory)
        trust_store_dir: Directory of PEM issuer certificates used instead of
            the bundled trust anchors when no store is passed explicitly
        log_level: Level applied to the component loggers
    """
    require_photo: bool = True
    concurrent_pipeline: bool = False
    photo_temp_dir: Optional[Path] = None
    trust_store_dir: Optional[Path] = None
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls) -> "QRParserConfig":
        """
        Load configuration from MIDNI_* environment variables.

        Raises:
            ValueError: If MIDNI_LOG_LEVEL is not a logging level name
        """
        level_name = os.getenv("MIDNI_LOG_LEVEL", "INFO").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"Unsupported MIDNI_LOG_LEVEL '{level_name}'")

        return cls(
            require_photo=_env_bool("MIDNI_REQUIRE_PHOTO", True),
            concurrent_pipeline=_env_bool("MIDNI_CONCURRENT_PIPELINE", False),
            photo_temp_dir=_env_path("MIDNI_PHOTO_TEMP_DIR"),
            trust_store_dir=_env_path("MIDNI_TRUST_STORE_DIR"),
            log_level=level,
        )


DEFAULT_PARSER_CONFIG = QRParserConfig()
