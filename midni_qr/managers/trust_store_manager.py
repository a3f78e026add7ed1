"""
Trust Store Manager

Holds the issuer certificates trusted for signature verification.

A CertificateStore maps a certificate reference (lowercase hex) to the PEM
bytes of the issuer certificate. It is supplied by the caller and is
read-only to the decoder. TrustStoreManager builds stores from a directory of
PEM files or from the trust anchors bundled with the package.

Author: MiDNI QR Project
Date: October 2026
"""

from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from midni_qr.config import QR_CONSTANTS, QRParserConfig
from midni_qr.protocols.core.crypto import load_certificate
from midni_qr.utils.cert_utils import describe_certificate, get_certificate_reference
from midni_qr.utils.logger import QRLogger


CERTIFICATE_SUFFIXES = (".pem", ".crt", ".cer")


class CertificateStore(Mapping):
    """
    Case-insensitive mapping: certificate reference -> PEM certificate bytes.
    """

    def __init__(self, entries: Optional[Mapping] = None):
        self._entries: Dict[str, bytes] = {}
        for reference, pem in (entries or {}).items():
            if isinstance(pem, str):
                pem = pem.encode("ascii")
            self._entries[self._normalize(reference)] = pem

    @staticmethod
    def _normalize(reference: str) -> str:
        return reference.strip().lower()

    def __getitem__(self, reference: str) -> bytes:
        return self._entries[self._normalize(reference)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CertificateStore({sorted(self._entries)})"

    def lookup(self, reference: str) -> Optional[bytes]:
        """PEM bytes for reference, or None if the store has no match."""
        return self._entries.get(self._normalize(reference))

    def describe(self) -> List[dict]:
        """Summaries of every stored certificate, sorted by reference."""
        return [describe_certificate(load_certificate(self._entries[ref])) for ref in sorted(self._entries)]


CertificateStoreLike = Union[CertificateStore, Mapping]


class TrustStoreManager:
    """
    Builds CertificateStore instances.

    Certificates are keyed by their serial number, which is the reference the
    issuer prints in the QR header.
    """

    logger = QRLogger.for_component("trust_store")

    @classmethod
    def from_pem_list(cls, pem_certificates: List[Union[bytes, str]]) -> CertificateStore:
        entries = {}
        for pem in pem_certificates:
            certificate = load_certificate(pem)
            entries[get_certificate_reference(certificate)] = pem
        return CertificateStore(entries)

    @classmethod
    def load_directory(cls, directory: Union[str, Path]) -> CertificateStore:
        """
        Load every PEM certificate in a directory.

        Raises:
            FileNotFoundError: If the directory does not exist
            ValueError: If a certificate file cannot be parsed
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Trust store directory not found: {directory}")

        pem_certificates = [
            path.read_bytes()
            for path in sorted(directory.iterdir())
            if path.suffix.lower() in CERTIFICATE_SUFFIXES
        ]
        store = cls.from_pem_list(pem_certificates)
        cls.logger.info(f"Loaded {len(store)} trust anchors from {directory}")
        return store

    @classmethod
    def load_bundled(cls) -> CertificateStore:
        """Trust anchors shipped with the package (issuer certificates in use)."""
        package = resources.files(QR_CONSTANTS.TRUST_ANCHORS_PACKAGE)
        pem_certificates = [
            entry.read_bytes()
            for entry in sorted(package.iterdir(), key=lambda e: e.name)
            if entry.name.lower().endswith(CERTIFICATE_SUFFIXES)
        ]
        store = cls.from_pem_list(pem_certificates)
        cls.logger.debug(f"Loaded {len(store)} bundled trust anchors")
        return store

    @classmethod
    def from_config(cls, config: QRParserConfig) -> CertificateStore:
        if config.trust_store_dir is not None:
            return cls.load_directory(config.trust_store_dir)
        return cls.load_bundled()
